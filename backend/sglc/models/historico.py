from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from datetime import datetime
import enum
from sglc.models.base import Base


class AbaHistorico(str, enum.Enum):
    """Seção do processo a que a alteração pertence"""
    GERAL = "geral"
    FINANCEIRO = "financeiro"
    NOTAS_FISCAIS = "notas_fiscais"


class AcaoHistorico(str, enum.Enum):
    CRIOU = "criou"
    ALTEROU = "alterou"
    DELETOU = "deletou"


class EntidadeHistorico(str, enum.Enum):
    """Tabela do registro auditado"""
    PROCESSO = "processo"
    LICITACAO = "licitacao"
    CONTRATO = "contrato"


class ProcessoHistorico(Base):
    """
    Trilha de auditoria (append-only)

    Cada linha descreve uma criação, alteração ou exclusão. Não existe
    caminho de update ou delete para esta tabela. usuario_nome é gravado
    no momento da ação e não acompanha mudanças posteriores no cadastro.
    """
    __tablename__ = "processo_historico"

    id = Column(Integer, primary_key=True, index=True)
    processo_id = Column(Integer, nullable=False, index=True)
    entidade = Column(String(20), nullable=False, default=EntidadeHistorico.PROCESSO.value)
    prefeitura_id = Column(Integer, ForeignKey('prefeituras.id'), nullable=False, index=True)

    usuario_id = Column(Integer, nullable=True)
    usuario_nome = Column(String(200), nullable=True)

    aba = Column(String(20), nullable=False, default=AbaHistorico.GERAL.value)
    acao = Column(String(20), nullable=False)
    campo_alterado = Column(String(100), nullable=True)
    valor_anterior = Column(Text, nullable=True)
    valor_novo = Column(Text, nullable=True)
    descricao = Column(Text, nullable=False)

    criado_em = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ProcessoHistorico {self.entidade}:{self.processo_id} {self.acao}>"

from sqlalchemy import Column, Integer, String, Text, Date, Numeric, UniqueConstraint
import enum
from sglc.models.base import Base, PrefeituraMixin, TimestampMixin, AuditMixin


class ModalidadeLicitacao(str, enum.Enum):
    PREGAO_ELETRONICO = "pregao_eletronico"
    PREGAO_PRESENCIAL = "pregao_presencial"
    CONCORRENCIA = "concorrencia"
    TOMADA_PRECOS = "tomada_precos"
    DISPENSA = "dispensa"
    INEXIGIBILIDADE = "inexigibilidade"
    RDC = "rdc"
    DIALOGO_COMPETITIVO = "dialogo_competitivo"


class StatusLicitacao(str, enum.Enum):
    EM_ABERTO = "em_aberto"
    EM_ANDAMENTO = "em_andamento"
    AGUARDANDO_DOCS = "aguardando_docs"
    EM_JULGAMENTO = "em_julgamento"
    HOMOLOGADA = "homologada"
    CANCELADA = "cancelada"
    DESERTA = "deserta"
    FRACASSADA = "fracassada"
    SUSPENSA = "suspensa"


class Licitacao(Base, PrefeituraMixin, TimestampMixin, AuditMixin):
    """
    Licitação

    numero_protocolo (LIC-AAAA-MM-NNNNN) é numerado pela quantidade de
    licitações da prefeitura criadas no mês.
    Modalidade e status são gravados como texto (valores dos enums acima).
    """
    __tablename__ = "licitacoes"

    id = Column(Integer, primary_key=True, index=True)
    numero_protocolo = Column(String(30), nullable=False, index=True)
    modalidade = Column(String(30), nullable=False)
    objeto = Column(Text, nullable=False)
    secretaria = Column(String(200), nullable=False)
    responsavel = Column(String(200), nullable=False)
    data_abertura = Column(Date, nullable=False)
    data_encerramento_prevista = Column(Date, nullable=True)
    valor_estimado = Column(Numeric(14, 2), nullable=True)
    fonte_recursos = Column(String(200), nullable=True)
    status = Column(String(30), default=StatusLicitacao.EM_ABERTO.value, nullable=False)
    observacoes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('prefeitura_id', 'numero_protocolo', name='uq_licitacao_prefeitura_protocolo'),
    )

    def __repr__(self):
        return f"<Licitacao {self.numero_protocolo}>"

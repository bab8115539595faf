"""
Sub-recursos do processo administrativo

Documentos, movimentações financeiras, notas fiscais, fiscais,
fiscalizações, observações e pagamentos. Todos pertencem a um processo
e carregam o prefeitura_id do processo.
"""
from sqlalchemy import Column, Integer, String, Text, Date, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import declared_attr, relationship
from datetime import date
from sglc.models.base import Base, PrefeituraMixin, TimestampMixin


class ProcessoFilhoMixin(PrefeituraMixin):
    """Vínculo com o processo dono do registro"""

    @declared_attr
    def processo_id(cls):
        return Column(Integer, ForeignKey('processos_administrativos.id'), nullable=False, index=True)


class ProcessoDocumento(Base, ProcessoFilhoMixin, TimestampMixin):
    """Documento anexado (apenas a URL; o arquivo fica no storage externo)"""
    __tablename__ = "processo_documentos"

    id = Column(Integer, primary_key=True, index=True)
    tipo_documento = Column(String(50), default="geral", nullable=False)
    nome_arquivo = Column(String(255), nullable=False)
    tipo_arquivo = Column(String(100), default="application/octet-stream", nullable=False)
    tamanho_bytes = Column(Integer, nullable=True)
    url_arquivo = Column(String(500), nullable=False)
    observacao = Column(Text, nullable=True)
    usuario_id = Column(Integer, nullable=True)
    usuario_nome = Column(String(200), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="documentos")


class ProcessoFinanceiro(Base, ProcessoFilhoMixin, TimestampMixin):
    """Movimentação financeira (empenho, liquidação, pagamento, anulação...)"""
    __tablename__ = "processo_financeiro"

    id = Column(Integer, primary_key=True, index=True)
    tipo = Column(String(50), nullable=False)
    valor = Column(Numeric(14, 2), nullable=False)
    data = Column(Date, nullable=False)
    descricao = Column(Text, nullable=True)
    responsavel = Column(String(200), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="movimentacoes")


class ProcessoNotaFiscal(Base, ProcessoFilhoMixin, TimestampMixin):
    """
    Nota fiscal do processo

    A exclusão é física e só é registrada no histórico depois de
    confirmada.
    """
    __tablename__ = "processo_notas_fiscais"

    id = Column(Integer, primary_key=True, index=True)
    numero_nota = Column(String(50), nullable=False)
    data_emissao = Column(Date, nullable=False)
    data_vencimento = Column(Date, nullable=True)
    valor = Column(Numeric(14, 2), nullable=False)
    fornecedor = Column(String(200), nullable=True)
    descricao = Column(Text, nullable=True)
    status = Column(String(20), default="pendente", nullable=False)  # pendente, paga, cancelada
    nome_arquivo = Column(String(255), nullable=True)
    url_arquivo = Column(String(500), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="notas_fiscais")


class ProcessoFiscal(Base, ProcessoFilhoMixin, TimestampMixin):
    """Servidor designado como fiscal do contrato"""
    __tablename__ = "processo_fiscais"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    cargo = Column(String(100), nullable=False)
    matricula = Column(String(50), nullable=True)
    telefone = Column(String(20), nullable=True)
    email = Column(String(200), nullable=True)
    observacoes = Column(Text, nullable=True)
    tipo_fiscal = Column(String(20), default="titular", nullable=False)  # titular, suplente
    ativo = Column(Boolean, default=True, nullable=False)

    processo = relationship("ProcessoAdministrativo", back_populates="fiscais")


class ProcessoFiscalizacao(Base, ProcessoFilhoMixin, TimestampMixin):
    """Registro de vistoria/fiscalização"""
    __tablename__ = "processo_fiscalizacao"

    id = Column(Integer, primary_key=True, index=True)
    tipo = Column(String(50), nullable=False)
    responsavel_fiscal = Column(String(200), nullable=True)
    data_vistoria = Column(Date, nullable=True)
    status = Column(String(30), default="Em andamento", nullable=False)
    observacao = Column(Text, nullable=True)
    arquivo_url = Column(String(500), nullable=True)
    arquivo_nome = Column(String(255), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="fiscalizacoes")


class ProcessoObservacao(Base, ProcessoFilhoMixin, TimestampMixin):
    __tablename__ = "processo_observacoes"

    id = Column(Integer, primary_key=True, index=True)
    conteudo = Column(Text, nullable=False)
    usuario_id = Column(Integer, nullable=True)
    usuario_nome = Column(String(200), nullable=True)
    usuario_email = Column(String(200), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="observacoes_registradas")


class ProcessoPagamento(Base, ProcessoFilhoMixin, TimestampMixin):
    __tablename__ = "processo_pagamentos"

    id = Column(Integer, primary_key=True, index=True)
    tipo_pagamento = Column(String(30), default="outros", nullable=False)
    numero_processo_pagamento = Column(String(50), nullable=True)
    data_pagamento = Column(Date, default=date.today, nullable=False)
    valor = Column(Numeric(14, 2), nullable=False)
    forma_pagamento = Column(String(50), nullable=True)
    observacao = Column(Text, nullable=True)
    url_comprovante = Column(String(500), nullable=True)
    nome_comprovante = Column(String(255), nullable=True)

    processo = relationship("ProcessoAdministrativo", back_populates="pagamentos")

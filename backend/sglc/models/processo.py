from sqlalchemy import Column, Integer, String, Text, Date, Numeric, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from sglc.models.base import Base, PrefeituraMixin, TimestampMixin, AuditMixin


class TipoProcesso(str, enum.Enum):
    LICITACAO = "licitacao"
    CONTRATO = "contrato"


class StatusProcesso(str, enum.Enum):
    """
    Status do processo administrativo

    ARQUIVADO é terminal: processos nunca são apagados fisicamente,
    a exclusão move o processo para ARQUIVADO.
    """
    ABERTO = "aberto"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    VIGENTE = "vigente"
    ENCERRADO = "encerrado"
    ARQUIVADO = "arquivado"


class ProcessoAdministrativo(Base, PrefeituraMixin, TimestampMixin, AuditMixin):
    """
    Processo administrativo (licitação ou contrato)

    numero_processo segue o formato {PREFIXO}-{AAAA}-{MM}-{NNNNN}
    (LIC para licitação, CTR para contrato).
    """
    __tablename__ = "processos_administrativos"

    id = Column(Integer, primary_key=True, index=True)
    numero_processo = Column(String(30), nullable=False, index=True)
    tipo = Column(SQLEnum(TipoProcesso), nullable=False)
    descricao = Column(Text, nullable=True)
    status = Column(SQLEnum(StatusProcesso), default=StatusProcesso.ABERTO, nullable=False)

    # Dados da contratação
    modalidade = Column(String(50), nullable=True)
    secretaria = Column(String(200), nullable=True)
    fornecedor = Column(String(200), nullable=True)
    data_abertura = Column(Date, nullable=True)
    data_encerramento = Column(Date, nullable=True)

    # Valores
    valor_estimado = Column(Numeric(14, 2), nullable=True)
    valor_total = Column(Numeric(14, 2), nullable=True)
    valor_pago = Column(Numeric(14, 2), nullable=True)

    observacoes = Column(Text, nullable=True)

    # Sub-recursos
    documentos = relationship("ProcessoDocumento", back_populates="processo")
    movimentacoes = relationship("ProcessoFinanceiro", back_populates="processo")
    notas_fiscais = relationship("ProcessoNotaFiscal", back_populates="processo")
    fiscais = relationship("ProcessoFiscal", back_populates="processo")
    fiscalizacoes = relationship("ProcessoFiscalizacao", back_populates="processo")
    observacoes_registradas = relationship("ProcessoObservacao", back_populates="processo")
    pagamentos = relationship("ProcessoPagamento", back_populates="processo")

    __table_args__ = (
        UniqueConstraint('prefeitura_id', 'numero_processo', name='uq_processo_prefeitura_numero'),
    )

    def __repr__(self):
        return f"<ProcessoAdministrativo {self.numero_processo}>"

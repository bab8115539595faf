from sqlalchemy import Column, Integer, String, Text, Date, Numeric, UniqueConstraint
import enum
from sglc.models.base import Base, PrefeituraMixin, TimestampMixin, AuditMixin


class StatusContrato(str, enum.Enum):
    VIGENTE = "vigente"
    ENCERRADO = "encerrado"
    SUSPENSO = "suspenso"
    CANCELADO = "cancelado"


class Contrato(Base, PrefeituraMixin, TimestampMixin, AuditMixin):
    """
    Contrato firmado pela prefeitura

    cnpj_contratada é gravado só com dígitos (14).
    A exclusão é lógica (deleted_at).
    """
    __tablename__ = "contratos"

    id = Column(Integer, primary_key=True, index=True)
    numero_contrato = Column(String(50), nullable=False, index=True)
    processo_administrativo = Column(String(50), nullable=True)
    modalidade = Column(String(30), nullable=True)
    objeto = Column(Text, nullable=False)
    valor_total = Column(Numeric(14, 2), nullable=False)

    # Contratada
    cnpj_contratada = Column(String(14), nullable=False, index=True)
    nome_contratada = Column(String(200), nullable=False)
    responsavel_contratada = Column(String(200), nullable=True)

    # Vigência
    data_assinatura = Column(Date, nullable=False)
    data_inicio_vigencia = Column(Date, nullable=False)
    data_fim_vigencia = Column(Date, nullable=False)
    status_contrato = Column(String(20), default=StatusContrato.VIGENTE.value, nullable=False)

    arquivo_pdf = Column(String(500), nullable=True)
    dotacao_orcamentaria = Column(String(200), nullable=True)
    fiscal_contrato = Column(String(200), nullable=True)
    gestor_contrato = Column(String(200), nullable=True)
    observacoes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('prefeitura_id', 'numero_contrato', name='uq_contrato_prefeitura_numero'),
    )

    def __repr__(self):
        return f"<Contrato {self.numero_contrato}>"

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from sglc.models.contrato import StatusContrato
from sglc.schemas.comum import nao_nulo, sanitizar_texto, somente_digitos

CAMPOS_TEXTO = (
    "numero_contrato", "processo_administrativo", "modalidade", "objeto",
    "nome_contratada", "responsavel_contratada", "arquivo_pdf",
    "dotacao_orcamentaria", "fiscal_contrato", "gestor_contrato", "observacoes",
)


def _validar_cnpj(v):
    if v is None:
        return v
    digitos = somente_digitos(v)
    if len(digitos) != 14:
        raise ValueError("CNPJ deve conter 14 dígitos")
    return digitos


class ContratoBase(BaseModel):
    processo_administrativo: Optional[str] = Field(None, max_length=50)
    modalidade: Optional[str] = Field(None, max_length=30)
    responsavel_contratada: Optional[str] = Field(None, max_length=200)
    arquivo_pdf: Optional[str] = Field(None, max_length=500)
    dotacao_orcamentaria: Optional[str] = Field(None, max_length=200)
    fiscal_contrato: Optional[str] = Field(None, max_length=200)
    gestor_contrato: Optional[str] = Field(None, max_length=200)
    observacoes: Optional[str] = None

    class Config:
        use_enum_values = True


class ContratoCreate(ContratoBase):
    """
    Schema para criação de contrato

    numero_contrato é opcional: sem ele o sistema gera CTR-AAAA-MM-NNNNN.
    """
    numero_contrato: Optional[str] = Field(None, max_length=50)
    objeto: str = Field(..., min_length=1)
    valor_total: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    cnpj_contratada: str
    nome_contratada: str = Field(..., min_length=1, max_length=200)
    data_assinatura: date
    data_inicio_vigencia: date
    data_fim_vigencia: date
    status_contrato: StatusContrato = StatusContrato.VIGENTE.value

    @field_validator(*CAMPOS_TEXTO, mode="before")
    @classmethod
    def sanitizar(cls, v):
        return sanitizar_texto(v)

    @field_validator("cnpj_contratada")
    @classmethod
    def validar_cnpj(cls, v):
        return _validar_cnpj(v)

    @model_validator(mode="after")
    def validar_vigencia(self):
        if self.data_fim_vigencia < self.data_inicio_vigencia:
            raise ValueError("Data de fim da vigência deve ser posterior ao início")
        return self


class ContratoUpdate(ContratoBase):
    numero_contrato: Optional[str] = Field(None, min_length=1, max_length=50)
    objeto: Optional[str] = Field(None, min_length=1)
    valor_total: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    cnpj_contratada: Optional[str] = None
    nome_contratada: Optional[str] = Field(None, min_length=1, max_length=200)
    data_assinatura: Optional[date] = None
    data_inicio_vigencia: Optional[date] = None
    data_fim_vigencia: Optional[date] = None
    status_contrato: Optional[StatusContrato] = None

    @field_validator(*CAMPOS_TEXTO, mode="before")
    @classmethod
    def sanitizar(cls, v):
        return sanitizar_texto(v)

    @field_validator("cnpj_contratada")
    @classmethod
    def validar_cnpj(cls, v):
        return _validar_cnpj(v)

    @field_validator(
        "numero_contrato", "objeto", "valor_total", "cnpj_contratada", "nome_contratada",
        "data_assinatura", "data_inicio_vigencia", "data_fim_vigencia", "status_contrato"
    )
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class ContratoResponse(ContratoBase):
    id: int
    prefeitura_id: int
    numero_contrato: str
    objeto: str
    valor_total: Decimal
    cnpj_contratada: str
    nome_contratada: str
    data_assinatura: date
    data_inicio_vigencia: date
    data_fim_vigencia: date
    status_contrato: str
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


CAMPOS_HISTORICO_CONTRATO = [
    "numero_contrato", "objeto", "valor_total", "cnpj_contratada", "nome_contratada",
    "data_assinatura", "data_inicio_vigencia", "data_fim_vigencia", "status_contrato",
    "fiscal_contrato", "gestor_contrato", "observacoes",
]

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from sglc.models.licitacao import ModalidadeLicitacao, StatusLicitacao
from sglc.schemas.comum import nao_nulo, sanitizar_texto


class LicitacaoBase(BaseModel):
    """Campos opcionais comuns; enums são guardados pelo valor (colunas texto)"""
    data_encerramento_prevista: Optional[date] = None
    valor_estimado: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    fonte_recursos: Optional[str] = Field(None, max_length=200)
    observacoes: Optional[str] = None

    class Config:
        use_enum_values = True

    @field_validator("fonte_recursos", "observacoes", mode="before")
    @classmethod
    def limpar_opcionais(cls, v):
        return sanitizar_texto(v)


class LicitacaoCreate(LicitacaoBase):
    """
    Schema para criação de licitação

    Obrigatórios: modalidade, objeto, secretaria, data_abertura, responsavel.
    O número de protocolo é gerado pelo sistema.
    """
    modalidade: ModalidadeLicitacao
    objeto: str = Field(..., min_length=1)
    secretaria: str = Field(..., min_length=1, max_length=200)
    data_abertura: date
    responsavel: str = Field(..., min_length=1, max_length=200)
    status: StatusLicitacao = StatusLicitacao.EM_ABERTO.value

    @field_validator("objeto", "secretaria", "responsavel", mode="before")
    @classmethod
    def limpar_obrigatorios(cls, v):
        return sanitizar_texto(v)


class LicitacaoUpdate(LicitacaoBase):
    modalidade: Optional[ModalidadeLicitacao] = None
    objeto: Optional[str] = Field(None, min_length=1)
    secretaria: Optional[str] = Field(None, min_length=1, max_length=200)
    data_abertura: Optional[date] = None
    responsavel: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[StatusLicitacao] = None

    @field_validator("objeto", "secretaria", "responsavel", mode="before")
    @classmethod
    def limpar_obrigatorios(cls, v):
        return sanitizar_texto(v)

    @field_validator("modalidade", "objeto", "secretaria", "data_abertura", "responsavel", "status")
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class LicitacaoResponse(LicitacaoBase):
    id: int
    prefeitura_id: int
    numero_protocolo: str
    modalidade: str
    objeto: str
    secretaria: str
    data_abertura: date
    responsavel: str
    status: str
    criado_por: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


CAMPOS_HISTORICO_LICITACAO = [
    "modalidade", "objeto", "secretaria", "data_abertura", "data_encerramento_prevista",
    "valor_estimado", "fonte_recursos", "responsavel", "status", "observacoes",
]

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from sglc.models.processo import TipoProcesso, StatusProcesso
from sglc.schemas.comum import nao_nulo, sanitizar_texto


class ProcessoBase(BaseModel):
    """Campos editáveis do processo administrativo"""
    descricao: Optional[str] = Field(None, description="Objeto/assunto do processo")
    modalidade: Optional[str] = Field(None, max_length=50)
    secretaria: Optional[str] = Field(None, max_length=200)
    fornecedor: Optional[str] = Field(None, max_length=200)
    data_abertura: Optional[date] = None
    data_encerramento: Optional[date] = None
    valor_estimado: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    valor_total: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    valor_pago: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    observacoes: Optional[str] = None

    @field_validator("descricao", "modalidade", "secretaria", "fornecedor", "observacoes", mode="before")
    @classmethod
    def limpar_texto(cls, v):
        return sanitizar_texto(v)


class ProcessoCreate(ProcessoBase):
    """Schema para criação de processo; o número é gerado pelo sistema"""
    tipo: TipoProcesso
    status: StatusProcesso = StatusProcesso.ABERTO

    @field_validator("status")
    @classmethod
    def status_inicial(cls, v):
        if v == StatusProcesso.ARQUIVADO:
            raise ValueError("Processo não pode ser criado arquivado")
        return v


class ProcessoUpdate(ProcessoBase):
    """Schema para atualização (campos opcionais); arquivar é feito pelo DELETE"""
    status: Optional[StatusProcesso] = None

    @field_validator("status")
    @classmethod
    def status_permitido(cls, v):
        nao_nulo(v)
        if v == StatusProcesso.ARQUIVADO:
            raise ValueError("Use a exclusão do processo para arquivá-lo")
        return v


class ProcessoResponse(ProcessoBase):
    """Schema para resposta da API"""
    id: int
    prefeitura_id: int
    numero_processo: str
    tipo: TipoProcesso
    status: StatusProcesso
    criado_por: Optional[int] = None
    atualizado_por: Optional[int] = None
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Campos comparados no histórico de alterações
CAMPOS_HISTORICO_PROCESSO = [
    "descricao", "status", "modalidade", "secretaria", "fornecedor",
    "data_abertura", "data_encerramento",
    "valor_estimado", "valor_total", "valor_pago", "observacoes",
]

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from sglc.schemas.comum import somente_digitos


class PrefeituraCreate(BaseModel):
    """Schema para cadastrar uma prefeitura"""
    nome: str = Field(..., min_length=3, max_length=200)
    cnpj: str = Field(..., description="CNPJ com ou sem formatação")
    cidade: Optional[str] = Field(None, max_length=100)
    estado: Optional[str] = Field(None, min_length=2, max_length=2)
    email_contato: Optional[EmailStr] = None
    telefone: Optional[str] = Field(None, max_length=20)

    @field_validator("cnpj")
    @classmethod
    def validar_cnpj(cls, v):
        """Normaliza para 14 dígitos"""
        digitos = somente_digitos(v)
        if len(digitos) != 14:
            raise ValueError("CNPJ deve conter 14 dígitos")
        return digitos

    @field_validator("estado")
    @classmethod
    def uf_maiuscula(cls, v):
        return v.upper() if v else v


class PrefeituraResponse(BaseModel):
    id: int
    nome: str
    cnpj: str
    cidade: Optional[str] = None
    estado: Optional[str] = None
    ativo: bool
    email_contato: Optional[str] = None
    telefone: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from sglc.models.usuario import TipoUsuario
from sglc.schemas.comum import nao_nulo, sanitizar_texto


def _email_minusculo(v):
    return v.strip().lower() if isinstance(v, str) else v


class UsuarioResponse(BaseModel):
    """Schema de resposta para Usuario (SEM senha!)"""
    id: int
    prefeitura_id: Optional[int] = None
    nome_completo: str
    email: str
    tipo: TipoUsuario
    ativo: bool
    cargo: Optional[str] = None
    secretaria: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UsuarioCriadoResponse(UsuarioResponse):
    """Resposta da criação: a senha temporária só é exibida aqui"""
    senha_temporaria: str


class UsuarioCreate(BaseModel):
    """
    Schema para cadastrar usuário

    A senha é temporária e gerada pelo sistema. prefeitura_id só é aceito
    de usuários master; para os demais vale a prefeitura do administrador.
    """
    nome_completo: str = Field(..., min_length=3, max_length=200)
    email: EmailStr
    tipo: TipoUsuario = TipoUsuario.OPERACIONAL
    cargo: Optional[str] = Field(None, max_length=100)
    secretaria: Optional[str] = Field(None, max_length=200)
    prefeitura_id: Optional[int] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalizar_email(cls, v):
        return _email_minusculo(v)

    @field_validator("nome_completo", "cargo", "secretaria", mode="before")
    @classmethod
    def limpar_texto(cls, v):
        return sanitizar_texto(v)


class UsuarioUpdate(BaseModel):
    nome_completo: Optional[str] = Field(None, min_length=3, max_length=200)
    email: Optional[EmailStr] = None
    tipo: Optional[TipoUsuario] = None
    cargo: Optional[str] = Field(None, max_length=100)
    secretaria: Optional[str] = Field(None, max_length=200)

    @field_validator("email", mode="before")
    @classmethod
    def normalizar_email(cls, v):
        return _email_minusculo(v)

    @field_validator("nome_completo", "cargo", "secretaria", mode="before")
    @classmethod
    def limpar_texto(cls, v):
        return sanitizar_texto(v)

    @field_validator("nome_completo", "email", "tipo")
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class UsuarioStatusUpdate(BaseModel):
    ativo: bool


class UsuarioLogin(BaseModel):
    """Schema para login"""
    email: str
    senha: str = Field(..., min_length=1)


class Token(BaseModel):
    """Schema de resposta para autenticação"""
    access_token: str
    token_type: str = "bearer"
    user: UsuarioResponse
    prefeitura: Optional[dict] = None

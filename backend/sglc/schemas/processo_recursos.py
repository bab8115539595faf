"""
Schemas dos sub-recursos do processo administrativo
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from sglc.schemas.comum import nao_nulo, sanitizar_texto


class RecursoResponse(BaseModel):
    """Campos comuns das respostas de sub-recursos"""
    id: int
    processo_id: int
    prefeitura_id: int
    created_at: datetime

    class Config:
        from_attributes = True


# ============ DOCUMENTOS ============

class DocumentoCreate(BaseModel):
    tipo_documento: str = Field("geral", max_length=50)
    nome_arquivo: str = Field(..., min_length=1, max_length=255)
    tipo_arquivo: str = Field("application/octet-stream", max_length=100)
    tamanho_bytes: Optional[int] = Field(None, ge=0)
    url_arquivo: str = Field(..., min_length=1, max_length=500)
    observacao: Optional[str] = None


class DocumentoResponse(RecursoResponse):
    tipo_documento: str
    nome_arquivo: str
    tipo_arquivo: str
    tamanho_bytes: Optional[int] = None
    url_arquivo: str
    observacao: Optional[str] = None
    usuario_id: Optional[int] = None
    usuario_nome: Optional[str] = None


# ============ FINANCEIRO ============

class FinanceiroCreate(BaseModel):
    tipo: str = Field(..., min_length=1, max_length=50, description="empenho, liquidação, pagamento...")
    valor: Decimal = Field(..., max_digits=14, decimal_places=2)
    data: date
    descricao: Optional[str] = None
    responsavel: Optional[str] = Field(None, max_length=200)


class FinanceiroUpdate(BaseModel):
    tipo: Optional[str] = Field(None, min_length=1, max_length=50)
    valor: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)
    data: Optional[date] = None
    descricao: Optional[str] = None
    responsavel: Optional[str] = Field(None, max_length=200)

    @field_validator("tipo", "valor", "data")
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class FinanceiroResponse(RecursoResponse):
    tipo: str
    valor: Decimal
    data: date
    descricao: Optional[str] = None
    responsavel: Optional[str] = None


CAMPOS_HISTORICO_FINANCEIRO = ["tipo", "valor", "data", "descricao", "responsavel"]


# ============ NOTAS FISCAIS ============

class NotaFiscalCreate(BaseModel):
    numero_nota: str = Field(..., min_length=1, max_length=50)
    data_emissao: date
    data_vencimento: Optional[date] = None
    valor: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    fornecedor: Optional[str] = Field(None, max_length=200)
    descricao: Optional[str] = None
    status: str = Field("pendente", max_length=20)
    nome_arquivo: Optional[str] = Field(None, max_length=255)
    url_arquivo: Optional[str] = Field(None, max_length=500)

    @field_validator("numero_nota", mode="before")
    @classmethod
    def limpar_numero(cls, v):
        return sanitizar_texto(v)


class NotaFiscalUpdate(BaseModel):
    numero_nota: Optional[str] = Field(None, min_length=1, max_length=50)
    data_emissao: Optional[date] = None
    data_vencimento: Optional[date] = None
    valor: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    fornecedor: Optional[str] = Field(None, max_length=200)
    descricao: Optional[str] = None
    status: Optional[str] = Field(None, max_length=20)
    nome_arquivo: Optional[str] = Field(None, max_length=255)
    url_arquivo: Optional[str] = Field(None, max_length=500)

    @field_validator("numero_nota", mode="before")
    @classmethod
    def limpar_numero(cls, v):
        return sanitizar_texto(v)

    @field_validator("numero_nota", "data_emissao", "valor", "status")
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class NotaFiscalResponse(RecursoResponse):
    numero_nota: str
    data_emissao: date
    data_vencimento: Optional[date] = None
    valor: Decimal
    fornecedor: Optional[str] = None
    descricao: Optional[str] = None
    status: str
    nome_arquivo: Optional[str] = None
    url_arquivo: Optional[str] = None


CAMPOS_HISTORICO_NOTA = [
    "numero_nota", "valor", "data_emissao", "data_vencimento", "status", "fornecedor",
]


# ============ FISCAIS ============

class FiscalCreate(BaseModel):
    nome: str = Field(..., min_length=1, max_length=200)
    cargo: str = Field(..., min_length=1, max_length=100)
    matricula: Optional[str] = Field(None, max_length=50)
    telefone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    observacoes: Optional[str] = None
    tipo_fiscal: str = Field("titular", max_length=20)

    @field_validator("nome", "cargo", mode="before")
    @classmethod
    def limpar(cls, v):
        return sanitizar_texto(v)


class FiscalUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=1, max_length=200)
    cargo: Optional[str] = Field(None, min_length=1, max_length=100)
    matricula: Optional[str] = Field(None, max_length=50)
    telefone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    observacoes: Optional[str] = None
    tipo_fiscal: Optional[str] = Field(None, max_length=20)
    ativo: Optional[bool] = None

    @field_validator("nome", "cargo", mode="before")
    @classmethod
    def limpar(cls, v):
        return sanitizar_texto(v)

    @field_validator("nome", "cargo", "tipo_fiscal", "ativo")
    @classmethod
    def obrigatorios(cls, v):
        return nao_nulo(v)


class FiscalResponse(RecursoResponse):
    nome: str
    cargo: str
    matricula: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    observacoes: Optional[str] = None
    tipo_fiscal: str
    ativo: bool


# ============ FISCALIZAÇÃO ============

class FiscalizacaoCreate(BaseModel):
    tipo: str = Field(..., min_length=1, max_length=50)
    responsavel_fiscal: Optional[str] = Field(None, max_length=200)
    data_vistoria: Optional[date] = None
    status: str = Field("Em andamento", max_length=30)
    observacao: Optional[str] = None
    arquivo_url: Optional[str] = Field(None, max_length=500)
    arquivo_nome: Optional[str] = Field(None, max_length=255)


class FiscalizacaoResponse(RecursoResponse):
    tipo: str
    responsavel_fiscal: Optional[str] = None
    data_vistoria: Optional[date] = None
    status: str
    observacao: Optional[str] = None
    arquivo_url: Optional[str] = None
    arquivo_nome: Optional[str] = None


# ============ OBSERVAÇÕES ============

class ObservacaoCreate(BaseModel):
    conteudo: str = Field(..., min_length=1)

    @field_validator("conteudo", mode="before")
    @classmethod
    def conteudo_nao_vazio(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v


class ObservacaoResponse(RecursoResponse):
    conteudo: str
    usuario_id: Optional[int] = None
    usuario_nome: Optional[str] = None
    usuario_email: Optional[str] = None


# ============ PAGAMENTOS ============

class PagamentoCreate(BaseModel):
    tipo_pagamento: str = Field("outros", max_length=30)
    numero_processo_pagamento: Optional[str] = Field(None, max_length=50)
    data_pagamento: Optional[date] = None
    valor: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    forma_pagamento: Optional[str] = Field(None, max_length=50)
    observacao: Optional[str] = None
    url_comprovante: Optional[str] = Field(None, max_length=500)
    nome_comprovante: Optional[str] = Field(None, max_length=255)


class PagamentoResponse(RecursoResponse):
    tipo_pagamento: str
    numero_processo_pagamento: Optional[str] = None
    data_pagamento: date
    valor: Decimal
    forma_pagamento: Optional[str] = None
    observacao: Optional[str] = None
    url_comprovante: Optional[str] = None
    nome_comprovante: Optional[str] = None

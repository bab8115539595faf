"""
Schemas comuns - envelope das respostas da API
"""
import re
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Paginacao(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class RespostaApi(BaseModel, Generic[T]):
    """Envelope padrão: {success, data, message}"""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class RespostaLista(BaseModel, Generic[T]):
    """Envelope de listagem, com paginação quando aplicável"""
    success: bool = True
    data: List[T]
    pagination: Optional[Paginacao] = None
    message: Optional[str] = None


def sanitizar_texto(v):
    """Remove espaços nas pontas e os caracteres < e >; vazio vira None"""
    if isinstance(v, str):
        v = re.sub(r"[<>]", "", v).strip()
        return v or None
    return v


def somente_digitos(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return re.sub(r"\D", "", str(v))


def nao_nulo(v):
    """Campos obrigatórios podem ser omitidos no update, mas não enviados nulos ou vazios"""
    if v is None:
        raise ValueError("Campo obrigatório não pode ser nulo ou vazio")
    return v

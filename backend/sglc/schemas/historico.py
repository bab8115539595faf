from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class HistoricoResponse(BaseModel):
    """Entrada da trilha de auditoria"""
    id: int
    processo_id: int
    entidade: str
    usuario_id: Optional[int] = None
    usuario_nome: Optional[str] = None
    aba: str
    acao: str
    campo_alterado: Optional[str] = None
    valor_anterior: Optional[str] = None
    valor_novo: Optional[str] = None
    descricao: str
    criado_em: datetime

    class Config:
        from_attributes = True

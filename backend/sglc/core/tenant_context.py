from contextvars import ContextVar
from typing import Optional

# Context var para armazenar a prefeitura da requisição atual
# Usado pelo filtro de logging para identificar o tenant em cada linha de log
_prefeitura_id_ctx_var: ContextVar[Optional[int]] = ContextVar('prefeitura_id', default=None)


def get_current_prefeitura_id() -> Optional[int]:
    """
    Obtém o prefeitura_id do contexto da requisição atual
    """
    return _prefeitura_id_ctx_var.get()


def set_current_prefeitura_id(prefeitura_id: Optional[int]) -> None:
    """
    Define o prefeitura_id no contexto da requisição atual
    """
    _prefeitura_id_ctx_var.set(prefeitura_id)


def clear_current_prefeitura_id() -> None:
    """
    Limpa o prefeitura_id do contexto
    """
    _prefeitura_id_ctx_var.set(None)

"""
Resiliência de leituras no banco

- retry_leitura: decorator de retry com backoff linear para leituras
- tabela_inexistente / coluna_inexistente: classificação de erros de schema

Uso:
    @retry_leitura
    def buscar(db: Session, ...):
        ...
"""
import functools
import logging
import time
from typing import Callable, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from sglc.config import settings

logger = logging.getLogger(__name__)

# Códigos SQLSTATE do Postgres
PG_UNDEFINED_TABLE = "42P01"
PG_UNDEFINED_COLUMN = "42703"


def _mensagem(erro: Exception) -> str:
    return str(getattr(erro, "orig", None) or erro).lower()


def _pgcode(erro: Exception) -> Optional[str]:
    return getattr(getattr(erro, "orig", None), "pgcode", None)


def tabela_inexistente(erro: Exception) -> bool:
    """Indica se o erro é de tabela ainda não criada no banco (schema não migrado)"""
    if _pgcode(erro) == PG_UNDEFINED_TABLE:
        return True
    msg = _mensagem(erro)
    return (
        "no such table" in msg
        or ("relation" in msg and "does not exist" in msg)
        or "schema cache" in msg
    )


def coluna_inexistente(erro: Exception) -> bool:
    """Indica se o erro é de coluna ausente (banco desatualizado em relação aos models)"""
    if _pgcode(erro) == PG_UNDEFINED_COLUMN:
        return True
    msg = _mensagem(erro)
    return (
        "no such column" in msg
        or "has no column named" in msg
        or ("column" in msg and "does not exist" in msg)
    )


def retry_leitura(
    func: Optional[Callable] = None,
    *,
    tentativas: Optional[int] = None,
    intervalo: Optional[float] = None,
) -> Callable:
    """
    Decorator de retry para leituras, com backoff linear.

    Repete a chamada em OperationalError (conexão perdida, timeout) até
    `tentativas` vezes, esperando `intervalo * tentativa` segundos entre elas.
    Tabela inexistente não é transitório e sobe na primeira ocorrência.

    Se o primeiro argumento for uma Session, ela recebe rollback antes de
    uma nova tentativa.

    Args:
        tentativas: Máximo de tentativas (default: settings.LEITURA_TENTATIVAS)
        intervalo: Intervalo base em segundos (default: settings.LEITURA_INTERVALO_SEGUNDOS)

    Exemplo:
        @retry_leitura(tentativas=5)
        def listar(db, prefeitura_id):
            ...
    """
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            max_tentativas = tentativas or settings.LEITURA_TENTATIVAS
            espera = settings.LEITURA_INTERVALO_SEGUNDOS if intervalo is None else intervalo

            tentativa = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except OperationalError as e:
                    if tabela_inexistente(e) or tentativa >= max_tentativas:
                        raise

                    logger.warning(
                        "[RETRY] %s falhou (tentativa %s/%s): %s",
                        fn.__name__, tentativa, max_tentativas, e,
                    )
                    if args and isinstance(args[0], Session):
                        args[0].rollback()
                    time.sleep(espera * tentativa)
                    tentativa += 1

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator

"""
Configuração de logging da aplicação
"""
import logging
from typing import Optional

from sglc.config import settings
from sglc.core.tenant_context import get_current_prefeitura_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [prefeitura=%(prefeitura_id)s] %(message)s"


class PrefeituraFilter(logging.Filter):
    """Adiciona o prefeitura_id da requisição atual em cada registro de log"""

    def filter(self, record: logging.LogRecord) -> bool:
        prefeitura_id = get_current_prefeitura_id()
        record.prefeitura_id = prefeitura_id if prefeitura_id is not None else "-"
        return True


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configura o logger raiz uma única vez.

    Chamadas repetidas (reload do uvicorn, testes) não duplicam handlers.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    if any(getattr(h, "_sglc", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler._sglc = True
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(PrefeituraFilter())
    root.addHandler(handler)

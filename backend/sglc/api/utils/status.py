"""
Status Helpers - Validação de status de entidades
"""
from typing import TypeVar, Union, List
from enum import Enum
from sglc.core.exceptions import ValidationError

T = TypeVar('T')


def forbid_status(
    entity: T,
    forbidden: Union[Enum, List[Enum]],
    operation: str = None
) -> None:
    """
    Valida que entidade NÃO está em status proibido.

    Args:
        entity: Entidade com campo 'status'
        forbidden: Status proibido ou lista de status proibidos
        operation: Nome da operação para mensagem de erro

    Raises:
        ValidationError (400) se status for proibido

    Usage:
        forbid_status(processo, StatusProcesso.ARQUIVADO, "Alteração")
    """
    blocked = forbidden if isinstance(forbidden, list) else [forbidden]

    if entity.status in blocked:
        msg = f"Operação não permitida no status {entity.status.value}"
        if operation:
            msg = f"{operation} não permitida no status {entity.status.value}"
        raise ValidationError(msg)

"""
Update Helpers - Funções para atualização de entidades
"""
from typing import TypeVar, List, Dict, Any
from sqlalchemy.orm import Session

T = TypeVar('T')


def snapshot(entity: T, campos: List[str]) -> Dict[str, Any]:
    """
    Copia os valores atuais dos campos, antes de uma atualização.

    Usado para comparar o registro anterior com o novo no histórico.
    """
    return {campo: getattr(entity, campo, None) for campo in campos}


def update_entity(
    db: Session,
    entity: T,
    update_data: Dict[str, Any],
    exclude_fields: List[str] = None,
    commit: bool = True
) -> T:
    """
    Atualiza entidade com os campos informados.

    Args:
        db: Sessão do banco
        entity: Entidade a atualizar
        update_data: Dict de {campo: valor} (ex: schema.model_dump(exclude_unset=True))
        exclude_fields: Campos a ignorar na atualização
        commit: Se deve fazer commit automático

    Returns:
        Entidade atualizada

    Usage:
        contrato = update_entity(db, contrato, dados)
        processo = update_entity(db, processo, dados, exclude_fields=["numero_processo"])
    """
    data = dict(update_data)

    if exclude_fields:
        data = {k: v for k, v in data.items() if k not in exclude_fields}

    for field, value in data.items():
        if hasattr(entity, field):
            setattr(entity, field, value)

    if commit:
        db.commit()
        db.refresh(entity)

    return entity

"""
Database Helpers - Funções utilitárias para operações de banco de dados
"""
from typing import Type, TypeVar, Optional, Any
from sqlalchemy.orm import Session
from sglc.core.exceptions import ValidationError

T = TypeVar('T')


def get_by_id(
    db: Session,
    model: Type[T],
    entity_id: int,
    prefeitura_id: int,
    incluir_excluidos: bool = False,
    **filtros
) -> Optional[T]:
    """
    Busca entidade por ID dentro da prefeitura.

    Não levanta exceção: a rota decide o que fazer com None
    (normalmente NotFoundError).

    Args:
        db: Sessão do banco de dados
        model: Classe do modelo SQLAlchemy
        entity_id: ID da entidade
        prefeitura_id: ID da prefeitura para isolamento multi-tenant
        incluir_excluidos: Se True, retorna também registros com deleted_at
        **filtros: Igualdades adicionais (ex: processo_id=10)

    Returns:
        Entidade encontrada ou None

    Usage:
        processo = get_by_id(db, ProcessoAdministrativo, processo_id, prefeitura_id)
        if not processo:
            raise NotFoundError("Processo não encontrado")
    """
    query = db.query(model).filter(
        model.id == entity_id,
        model.prefeitura_id == prefeitura_id
    )

    if filtros:
        query = query.filter_by(**filtros)

    if not incluir_excluidos and hasattr(model, "deleted_at"):
        query = query.filter(model.deleted_at.is_(None))

    return query.first()


def validate_unique(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
    prefeitura_id: int,
    exclude_id: int = None,
    display_name: str = None
) -> None:
    """
    Valida unicidade de campo dentro da prefeitura.

    Raises:
        ValidationError (400) se valor já existir

    Usage:
        validate_unique(db, Contrato, "numero_contrato", numero, prefeitura_id)
    """
    field = getattr(model, field_name)
    query = db.query(model).filter(
        field == field_value,
        model.prefeitura_id == prefeitura_id
    )

    if exclude_id:
        query = query.filter(model.id != exclude_id)

    if query.first():
        name = display_name or field_name
        raise ValidationError(f"{name} já cadastrado")

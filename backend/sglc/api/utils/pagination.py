"""
Pagination Helpers - Funções utilitárias para paginação e filtros
"""
from typing import TypeVar, Any, Optional, Tuple, List
from sqlalchemy.orm import Query
from sqlalchemy import or_

T = TypeVar('T')


def paginate_query(
    query: Query,
    page: int = 1,
    page_size: int = 50,
    order_by: Any = None
) -> Tuple[List[T], int]:
    """
    Aplica paginação em uma query e retorna itens + total.

    Args:
        query: Query SQLAlchemy
        page: Número da página (1-indexed)
        page_size: Tamanho da página
        order_by: Coluna(s) para ordenação - pode ser único ou tupla

    Returns:
        Tupla (lista_de_itens, total)

    Usage:
        items, total = paginate_query(query, page, limit, (Licitacao.created_at.desc(), Licitacao.id.desc()))
    """
    total = query.count()

    if order_by is not None:
        if isinstance(order_by, tuple):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return items, total


def pagination_meta(page: int, page_size: int, total: int) -> dict:
    """Bloco 'pagination' das respostas de listagem"""
    return {
        "page": page,
        "limit": page_size,
        "total": total,
        "total_pages": (total + page_size - 1) // page_size if page_size else 0
    }


def apply_search_filter(
    query: Query,
    search_term: Optional[str],
    *fields
) -> Query:
    """
    Aplica filtro de busca ILIKE em múltiplos campos.

    Usage:
        query = apply_search_filter(query, search, Licitacao.numero_protocolo, Licitacao.objeto)
    """
    if not search_term or not fields:
        return query

    conditions = [field.ilike(f"%{search_term}%") for field in fields]
    return query.filter(or_(*conditions))


def apply_filters(
    query: Query,
    filters: List[Tuple[Any, Any, str]]
) -> Query:
    """
    Aplica múltiplos filtros de uma vez; valores None são ignorados.

    Args:
        query: Query SQLAlchemy
        filters: Lista de (valor, campo, operador)
                 operador pode ser: "eq", "like", "in", "gt", "lt", "gte", "lte"

    Usage:
        query = apply_filters(query, [
            (status, Contrato.status_contrato, "eq"),
            (valor_min, Contrato.valor_total, "gte"),
        ])
    """
    for value, field, operator in filters:
        if value is None or value == "":
            continue

        if operator == "eq":
            query = query.filter(field == value)
        elif operator == "like":
            query = query.filter(field.ilike(f"%{value}%"))
        elif operator == "in":
            query = query.filter(field.in_(value))
        elif operator == "gt":
            query = query.filter(field > value)
        elif operator == "lt":
            query = query.filter(field < value)
        elif operator == "gte":
            query = query.filter(field >= value)
        elif operator == "lte":
            query = query.filter(field <= value)
        else:
            raise ValueError(f"Operador de filtro desconhecido: {operator}")

    return query

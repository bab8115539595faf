from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr, relationship
from datetime import datetime
from sglc.database import Base


class PrefeituraMixin:
    """
    Mixin para adicionar prefeitura_id nas tabelas de dados
    CRÍTICO para isolamento multi-tenant

    Todas as tabelas que herdam este mixin terão automaticamente:
    - prefeitura_id (foreign key para prefeituras.id)
    - relacionamento com Prefeitura
    """

    @declared_attr
    def prefeitura_id(cls):
        return Column(Integer, ForeignKey('prefeituras.id'), nullable=False, index=True)

    @declared_attr
    def prefeitura(cls):
        return relationship("Prefeitura", foreign_keys=[cls.prefeitura_id])


class TimestampMixin:
    """
    Mixin para campos de auditoria temporal
    Todas as tabelas terão created_at e updated_at
    """
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuditMixin:
    """
    Mixin para campos de auditoria de usuário
    Registra quem criou e quem atualizou
    Suporta soft delete (deleted_at)
    """

    @declared_attr
    def criado_por(cls):
        return Column(Integer, ForeignKey('usuarios.id'), nullable=True)

    @declared_attr
    def atualizado_por(cls):
        return Column(Integer, ForeignKey('usuarios.id'), nullable=True)

    deleted_at = Column(DateTime, nullable=True)  # Soft delete


__all__ = ['Base', 'PrefeituraMixin', 'TimestampMixin', 'AuditMixin']

"""
Modelo para controle de sequências numéricas
Garante que números nunca se repitam, mesmo com criações concorrentes
"""
from sqlalchemy import Column, Integer, String, UniqueConstraint
from sglc.models.base import Base


class Sequencia(Base):
    """
    Armazena o último número usado por prefeitura/tabela/prefixo/ano/mês.

    A linha é lida com SELECT ... FOR UPDATE antes do incremento, o que
    serializa criações simultâneas no mesmo escopo.
    Esta tabela NUNCA deve ser limpa.
    """
    __tablename__ = "sequencias"

    id = Column(Integer, primary_key=True, index=True)
    prefeitura_id = Column(Integer, nullable=False, index=True)
    entidade = Column(String(50), nullable=False)  # nome da tabela numerada
    prefixo = Column(String(10), nullable=False)  # LIC, CTR
    ano = Column(Integer, nullable=False)
    mes = Column(Integer, nullable=False)
    ultimo_numero = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            'prefeitura_id', 'entidade', 'prefixo', 'ano', 'mes',
            name='uq_sequencia_escopo'
        ),
    )

from sqlalchemy import Column, Integer, String, Boolean
from sglc.models.base import Base, TimestampMixin


class Prefeitura(Base, TimestampMixin):
    """
    Representa um município cliente do sistema (tenant)

    Cada prefeitura tem:
    - Seus próprios usuários
    - Seus próprios processos, licitações e contratos, isolados das demais
    """
    __tablename__ = "prefeituras"

    id = Column(Integer, primary_key=True, index=True)

    # Identificação
    nome = Column(String(200), nullable=False)
    cnpj = Column(String(14), unique=True, nullable=False, index=True)
    cidade = Column(String(100), nullable=True)
    estado = Column(String(2), nullable=True)  # UF

    # Status
    ativo = Column(Boolean, default=True, nullable=False)

    # Contato
    email_contato = Column(String(200), nullable=True)
    telefone = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<Prefeitura {self.nome} (ID: {self.id})>"

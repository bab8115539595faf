from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from sglc.models.base import Base, TimestampMixin


class TipoUsuario(str, enum.Enum):
    """
    Perfis de usuário do sistema
    """
    MASTER = "master"                            # Super admin - acesso a todas as prefeituras
    ADMIN_PREFEITURA = "admin_prefeitura"        # Administrador da prefeitura
    SETOR_LICITACOES = "setor_licitacoes"
    SETOR_JURIDICO = "setor_juridico"
    CONTROLE_INTERNO = "controle_interno"
    SETOR_FINANCEIRO = "setor_financeiro"
    OPERACIONAL = "operacional"                  # Apenas operação/consulta


class Usuario(Base, TimestampMixin):
    """
    Usuários do sistema

    prefeitura_id pode ser nulo: usuários master não pertencem a uma
    prefeitura, e usuários recém-cadastrados são vinculados no primeiro
    acesso (ver services.prefeitura_service).
    """
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    prefeitura_id = Column(Integer, ForeignKey('prefeituras.id'), nullable=True, index=True)

    # Dados pessoais
    nome_completo = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False, index=True)
    senha_hash = Column(String(255), nullable=False)  # Senha hasheada com bcrypt

    # Perfil e permissões
    tipo = Column(SQLEnum(TipoUsuario), default=TipoUsuario.OPERACIONAL, nullable=False)
    ativo = Column(Boolean, default=True, nullable=False)

    # Dados funcionais
    cargo = Column(String(100), nullable=True)
    secretaria = Column(String(200), nullable=True)

    prefeitura = relationship("Prefeitura", foreign_keys=[prefeitura_id])

    @property
    def is_master(self) -> bool:
        return self.tipo == TipoUsuario.MASTER

    def __repr__(self):
        return f"<Usuario {self.nome_completo} ({self.email})>"

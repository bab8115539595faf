from fastapi import Depends, Request
from sqlalchemy.orm import Session
from sglc.database import get_db
from sglc.core.exceptions import AuthError, ForbiddenError
from sglc.core.tenant_context import set_current_prefeitura_id
from sglc.models.usuario import Usuario, TipoUsuario
from sglc.services.historico_service import Ator
from sglc.services.prefeitura_service import obter_ou_vincular_prefeitura


def get_current_user_id(request: Request) -> int:
    """
    Extrai user_id do contexto da request (configurado pelo middleware)
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise AuthError("Usuário não identificado")
    return user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> Usuario:
    """
    Retorna objeto Usuario completo do usuário atual
    Valida se o usuário existe e está ativo
    """
    user = db.query(Usuario).filter_by(id=user_id, ativo=True).first()
    if not user:
        raise AuthError("Usuário não encontrado ou inativo")
    return user


def resolver_prefeitura_id(
    user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> int:
    """
    Usuários sem vínculo passam pelo provisionamento
    (TenantProvisioningError 403 se não houver prefeitura ativa).
    """
    return obter_ou_vincular_prefeitura(db, user)


async def get_current_prefeitura_id(
    request: Request,
    prefeitura_id: int = Depends(resolver_prefeitura_id)
) -> int:
    """
    Prefeitura da requisição

    Dependencies síncronas rodam no threadpool com uma cópia do contexto, e o
    que elas gravam no ContextVar se perde. Esta roda na task da requisição,
    então a rota (e o log dela) enxerga a prefeitura resolvida.
    """
    request.state.prefeitura_id = prefeitura_id
    set_current_prefeitura_id(prefeitura_id)
    return prefeitura_id


def get_ator(user: Usuario = Depends(get_current_user)) -> Ator:
    """Usuário atual no formato gravado no histórico"""
    return Ator.do_usuario(user)


def require_admin(
    user: Usuario = Depends(get_current_user)
) -> Usuario:
    """
    Dependency que requer que o usuário seja ADMIN da prefeitura ou MASTER
    """
    if user.tipo not in (TipoUsuario.ADMIN_PREFEITURA, TipoUsuario.MASTER):
        raise ForbiddenError("Acesso negado: apenas administradores")
    return user


def require_master(
    user: Usuario = Depends(get_current_user)
) -> Usuario:
    """
    Dependency que requer que o usuário seja MASTER (super admin)
    """
    if user.tipo != TipoUsuario.MASTER:
        raise ForbiddenError("Acesso negado: apenas usuário master")
    return user


__all__ = [
    "get_db",
    "get_current_user_id",
    "get_current_user",
    "resolver_prefeitura_id",
    "get_current_prefeitura_id",
    "get_ator",
    "require_admin",
    "require_master",
]

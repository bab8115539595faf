from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import timedelta
import logging
from sglc.api.deps import get_db, get_current_user
from sglc.config import settings
from sglc.core.exceptions import AuthError
from sglc.core.security import verify_password, create_access_token
from sglc.models.prefeitura import Prefeitura
from sglc.models.usuario import Usuario
from sglc.schemas.comum import RespostaApi
from sglc.schemas.usuario import UsuarioLogin, Token, UsuarioResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _resumo_prefeitura(prefeitura: Prefeitura) -> dict:
    return {"id": prefeitura.id, "nome": prefeitura.nome, "cnpj": prefeitura.cnpj}


@router.post("/login", response_model=Token)
def login(
    credentials: UsuarioLogin,
    db: Session = Depends(get_db)
):
    """
    Autenticação de usuário

    Fluxo:
    1. Busca o usuário ativo pelo email
    2. Verifica a senha
    3. Gera JWT token com user_id, prefeitura_id e tipo
    """
    usuario = db.query(Usuario).filter_by(
        email=credentials.email.strip().lower(),
        ativo=True
    ).first()

    if not usuario or not verify_password(credentials.senha, usuario.senha_hash):
        logger.info("Tentativa de login recusada para %s", credentials.email)
        raise AuthError("Email ou senha incorretos")

    access_token = create_access_token(
        data={
            "user_id": usuario.id,
            "prefeitura_id": usuario.prefeitura_id,
            "tipo": usuario.tipo.value,
        },
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UsuarioResponse.model_validate(usuario),
        "prefeitura": _resumo_prefeitura(usuario.prefeitura) if usuario.prefeitura else None,
    }


@router.get("/me", response_model=RespostaApi[UsuarioResponse])
def usuario_atual(current_user: Usuario = Depends(get_current_user)):
    """Dados do usuário autenticado"""
    return {"success": True, "data": UsuarioResponse.model_validate(current_user)}

"""
Rota de setup inicial do sistema.
Permite criar o primeiro usuário MASTER quando o banco está vazio.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
import logging
from sglc.database import get_db
from sglc.core.exceptions import ValidationError
from sglc.core.security import hash_password
from sglc.models.usuario import Usuario, TipoUsuario

logger = logging.getLogger(__name__)

router = APIRouter()


class SetupRequest(BaseModel):
    """Schema para requisição de setup inicial"""
    email: EmailStr
    senha: str = Field(..., min_length=8)
    nome_completo: str = Field(..., min_length=3, max_length=200)


class SetupResponse(BaseModel):
    """Schema para resposta de setup"""
    success: bool
    message: str
    email: Optional[str] = None


@router.get("/status")
def get_setup_status(db: Session = Depends(get_db)):
    """
    Verifica se o sistema já foi inicializado.
    Retorna se já existe um usuário MASTER.
    """
    master_exists = db.query(Usuario).filter(
        Usuario.tipo == TipoUsuario.MASTER
    ).first() is not None

    return {
        "success": True,
        "initialized": master_exists,
        "message": "Sistema já inicializado" if master_exists else "Sistema aguardando inicialização - use POST /api/v1/setup/init"
    }


@router.post("/init", response_model=SetupResponse, status_code=201)
def initialize_system(
    request: SetupRequest,
    db: Session = Depends(get_db)
):
    """
    Inicializa o sistema criando o primeiro usuário MASTER.

    IMPORTANTE: Este endpoint só funciona se NÃO existir nenhum usuário MASTER.
    O usuário master não pertence a nenhuma prefeitura.
    """
    master_exists = db.query(Usuario).filter(
        Usuario.tipo == TipoUsuario.MASTER
    ).first()

    if master_exists:
        raise ValidationError(
            "Sistema já foi inicializado. Não é possível criar outro usuário MASTER por este endpoint."
        )

    usuario = Usuario(
        prefeitura_id=None,
        nome_completo=request.nome_completo,
        email=request.email.lower(),
        senha_hash=hash_password(request.senha),
        tipo=TipoUsuario.MASTER,
        ativo=True
    )
    db.add(usuario)
    db.commit()
    logger.info("Sistema inicializado com usuário master %s", usuario.email)

    return SetupResponse(
        success=True,
        message="Sistema inicializado com sucesso! Use o email e a senha para fazer login.",
        email=usuario.email
    )

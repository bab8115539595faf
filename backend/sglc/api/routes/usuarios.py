"""
Rotas de Gestão de Usuários

- MASTER: gerencia usuários de qualquer prefeitura
- ADMIN da prefeitura: gerencia usuários da própria prefeitura, sem
  criar ou alterar administradores
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from sglc.api.deps import get_db, get_current_prefeitura_id, require_admin
from sglc.api.utils.pagination import apply_search_filter, paginate_query, pagination_meta
from sglc.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from sglc.core.security import gerar_senha_temporaria, hash_password
from sglc.models.prefeitura import Prefeitura
from sglc.models.usuario import Usuario, TipoUsuario
from sglc.schemas.comum import RespostaApi, RespostaLista
from sglc.schemas.usuario import (
    UsuarioCreate, UsuarioUpdate, UsuarioStatusUpdate,
    UsuarioResponse, UsuarioCriadoResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()

PERFIS_RESTRITOS = (TipoUsuario.MASTER, TipoUsuario.ADMIN_PREFEITURA)


def _obter_usuario(db: Session, usuario_id: int, atual: Usuario, prefeitura_id: int) -> Usuario:
    query = db.query(Usuario).filter(Usuario.id == usuario_id)
    if not atual.is_master:
        query = query.filter(Usuario.prefeitura_id == prefeitura_id)
    usuario = query.first()
    if not usuario:
        raise NotFoundError("Usuário não encontrado")
    return usuario


def _verificar_email(db: Session, email: str, exclude_id: Optional[int] = None):
    query = db.query(Usuario).filter(Usuario.email == email)
    if exclude_id:
        query = query.filter(Usuario.id != exclude_id)
    if query.first():
        raise ValidationError("Email já cadastrado")


def _pode_gerenciar(atual: Usuario, alvo: Usuario):
    # ADMIN só altera outro administrador se for ele mesmo
    if not atual.is_master and alvo.tipo in PERFIS_RESTRITOS and alvo.id != atual.id:
        raise ForbiddenError("Apenas o usuário master pode alterar administradores")


@router.get("/", response_model=RespostaLista[UsuarioResponse])
def listar_usuarios(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    search: Optional[str] = None,
    tipo: Optional[TipoUsuario] = None,
    ativo: Optional[bool] = None,
    prefeitura: Optional[int] = Query(None, description="Filtro por prefeitura (apenas master)"),
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    current_user: Usuario = Depends(require_admin)
):
    """
    Listar usuários com seus perfis

    Master vê todas as prefeituras (opcionalmente filtrando por uma);
    administradores veem apenas a própria.
    """
    query = db.query(Usuario)
    if current_user.is_master:
        if prefeitura:
            query = query.filter(Usuario.prefeitura_id == prefeitura)
    else:
        query = query.filter(Usuario.prefeitura_id == prefeitura_id)

    if tipo:
        query = query.filter(Usuario.tipo == tipo)
    if ativo is not None:
        query = query.filter(Usuario.ativo == ativo)
    query = apply_search_filter(query, search, Usuario.nome_completo, Usuario.email)

    usuarios, total = paginate_query(query, page, limit, (Usuario.nome_completo, Usuario.id))

    return {
        "success": True,
        "data": [UsuarioResponse.model_validate(u) for u in usuarios],
        "pagination": pagination_meta(page, limit, total)
    }


@router.post("/", response_model=RespostaApi[UsuarioCriadoResponse], status_code=201)
def criar_usuario(
    dados: UsuarioCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    current_user: Usuario = Depends(require_admin)
):
    """
    Cadastrar usuário com senha temporária

    A senha é devolvida uma única vez, na resposta.
    """
    if not current_user.is_master:
        if dados.tipo in PERFIS_RESTRITOS:
            raise ForbiddenError("Apenas o usuário master pode criar administradores")
        if dados.prefeitura_id not in (None, prefeitura_id):
            raise ForbiddenError("Administradores só cadastram usuários da própria prefeitura")

    destino = prefeitura_id
    if dados.tipo == TipoUsuario.MASTER:
        destino = None
    elif current_user.is_master and dados.prefeitura_id:
        existe = db.query(Prefeitura).filter(
            Prefeitura.id == dados.prefeitura_id,
            Prefeitura.ativo == True
        ).first()
        if not existe:
            raise NotFoundError("Prefeitura não encontrada ou inativa")
        destino = dados.prefeitura_id

    _verificar_email(db, dados.email)

    senha_temporaria = gerar_senha_temporaria()
    usuario = Usuario(
        prefeitura_id=destino,
        nome_completo=dados.nome_completo,
        email=dados.email,
        senha_hash=hash_password(senha_temporaria),
        tipo=dados.tipo,
        cargo=dados.cargo,
        secretaria=dados.secretaria,
        ativo=True
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)

    logger.info("Usuário %s criado por %s", usuario.email, current_user.email)

    resposta = UsuarioCriadoResponse(
        **UsuarioResponse.model_validate(usuario).model_dump(),
        senha_temporaria=senha_temporaria
    )
    return {
        "success": True,
        "data": resposta,
        "message": f"Usuário criado! Senha temporária: {senha_temporaria}"
    }


@router.put("/{usuario_id}", response_model=RespostaApi[UsuarioResponse])
def atualizar_usuario(
    usuario_id: int,
    dados: UsuarioUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    current_user: Usuario = Depends(require_admin)
):
    """Atualizar dados e perfil do usuário"""
    usuario = _obter_usuario(db, usuario_id, current_user, prefeitura_id)
    _pode_gerenciar(current_user, usuario)

    alteracoes = dados.model_dump(exclude_unset=True)

    if "tipo" in alteracoes and alteracoes["tipo"] != usuario.tipo:
        if not current_user.is_master and alteracoes["tipo"] in PERFIS_RESTRITOS:
            raise ForbiddenError("Apenas o usuário master pode promover administradores")
        if usuario.id == current_user.id:
            raise ValidationError("Não é possível alterar o próprio perfil")

    if alteracoes.get("email") and alteracoes["email"] != usuario.email:
        _verificar_email(db, alteracoes["email"], exclude_id=usuario.id)

    for campo, valor in alteracoes.items():
        setattr(usuario, campo, valor)

    db.commit()
    db.refresh(usuario)

    return {
        "success": True,
        "data": UsuarioResponse.model_validate(usuario),
        "message": "Usuário atualizado com sucesso"
    }


@router.patch("/{usuario_id}/ativo", response_model=RespostaApi[UsuarioResponse])
def alterar_status_usuario(
    usuario_id: int,
    dados: UsuarioStatusUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    current_user: Usuario = Depends(require_admin)
):
    """Ativar ou desativar usuário; usuários inativos não conseguem logar"""
    usuario = _obter_usuario(db, usuario_id, current_user, prefeitura_id)

    if usuario.id == current_user.id:
        raise ValidationError("Não é possível alterar o status do próprio usuário")
    _pode_gerenciar(current_user, usuario)

    usuario.ativo = dados.ativo
    db.commit()
    db.refresh(usuario)

    logger.info("Usuário %s %s por %s", usuario.email,
                "ativado" if usuario.ativo else "desativado", current_user.email)

    return {
        "success": True,
        "data": UsuarioResponse.model_validate(usuario),
        "message": f"Usuário {'ativado' if usuario.ativo else 'desativado'} com sucesso!"
    }

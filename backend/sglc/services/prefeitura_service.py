"""
Serviço de Prefeituras - resolução do tenant do usuário
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sglc.config import settings
from sglc.core.exceptions import TenantProvisioningError
from sglc.models.prefeitura import Prefeitura
from sglc.models.usuario import Usuario

logger = logging.getLogger(__name__)

HINT_SEM_PREFEITURA = (
    "Cadastre uma prefeitura ativa (POST /api/v1/prefeituras) ou peça ao "
    "administrador para vincular seu usuário a uma prefeitura."
)


def primeira_prefeitura_ativa(db: Session) -> Optional[Prefeitura]:
    return db.query(Prefeitura).filter(
        Prefeitura.ativo == True  # noqa: E712
    ).order_by(Prefeitura.id).first()


def _criar_prefeitura_padrao(db: Session) -> Prefeitura:
    """Busca ou cria a prefeitura padrão (CNPJ configurado em settings)"""
    prefeitura = db.query(Prefeitura).filter(
        Prefeitura.cnpj == settings.PREFEITURA_PADRAO_CNPJ
    ).first()

    if prefeitura:
        if not prefeitura.ativo:
            prefeitura.ativo = True
    else:
        prefeitura = Prefeitura(
            nome=settings.PREFEITURA_PADRAO_NOME,
            cnpj=settings.PREFEITURA_PADRAO_CNPJ,
            ativo=True
        )
        db.add(prefeitura)

    db.commit()
    db.refresh(prefeitura)
    logger.info("Prefeitura padrão disponibilizada (ID: %s)", prefeitura.id)
    return prefeitura


def _vincular_usuario(db: Session, usuario: Usuario, prefeitura: Prefeitura) -> None:
    """Vincula o usuário à prefeitura; falha no vínculo não impede a requisição"""
    try:
        usuario.prefeitura_id = prefeitura.id
        db.commit()
        logger.info("Usuário %s vinculado à prefeitura %s", usuario.id, prefeitura.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Não foi possível vincular usuário %s à prefeitura %s: %s", usuario.id, prefeitura.id, e)


def obter_ou_vincular_prefeitura(db: Session, usuario: Usuario) -> int:
    """
    Retorna o prefeitura_id a ser usado pelo usuário.

    Ordem:
    1. Prefeitura do próprio usuário, se ativa
    2. Primeira prefeitura ativa (vinculando o usuário, best effort)
    3. Prefeitura padrão, se CRIAR_PREFEITURA_PADRAO estiver habilitado

    Raises:
        TenantProvisioningError (403) se nenhuma prefeitura estiver disponível
    """
    if usuario.prefeitura_id:
        prefeitura = db.get(Prefeitura, usuario.prefeitura_id)
        if prefeitura and prefeitura.ativo:
            return prefeitura.id
        logger.warning("Prefeitura %s do usuário %s inativa ou inexistente", usuario.prefeitura_id, usuario.id)

    prefeitura = primeira_prefeitura_ativa(db)

    if not prefeitura and settings.CRIAR_PREFEITURA_PADRAO:
        prefeitura = _criar_prefeitura_padrao(db)

    if not prefeitura:
        raise TenantProvisioningError(hint=HINT_SEM_PREFEITURA, code="SEM_PREFEITURA")

    prefeitura_id = prefeitura.id
    if not usuario.is_master:
        _vincular_usuario(db, usuario, prefeitura)

    return prefeitura_id

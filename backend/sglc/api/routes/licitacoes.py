"""
Rotas de Licitações
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from decimal import Decimal
from sglc.api.deps import get_db, get_current_user, get_current_prefeitura_id, get_ator
from sglc.api.utils import (
    get_by_id, gerar_numero_sequencial, Prefixos,
    paginate_query, pagination_meta, apply_search_filter, apply_filters,
    update_entity, snapshot
)
from sglc.core.exceptions import NotFoundError
from sglc.core.tenant_context import set_current_prefeitura_id
from sglc.models.historico import AbaHistorico, EntidadeHistorico
from sglc.models.licitacao import Licitacao, ModalidadeLicitacao, StatusLicitacao
from sglc.models.usuario import Usuario
from sglc.schemas.comum import RespostaApi, RespostaLista
from sglc.schemas.historico import HistoricoResponse
from sglc.schemas.licitacao import (
    LicitacaoCreate, LicitacaoUpdate, LicitacaoResponse, CAMPOS_HISTORICO_LICITACAO
)
from sglc.services import historico_service
from sglc.services.historico_service import Ator
from sglc.services.prefeitura_service import obter_ou_vincular_prefeitura

router = APIRouter()


def _obter_licitacao(db: Session, licitacao_id: int, prefeitura_id: int) -> Licitacao:
    licitacao = get_by_id(db, Licitacao, licitacao_id, prefeitura_id)
    if not licitacao:
        raise NotFoundError("Licitação não encontrada")
    return licitacao


@router.get("/", response_model=RespostaLista[LicitacaoResponse])
def listar_licitacoes(
    search: Optional[str] = Query(None, description="Buscar por protocolo ou objeto"),
    modalidade: Optional[ModalidadeLicitacao] = Query(None),
    status: Optional[StatusLicitacao] = Query(None),
    secretaria: Optional[str] = Query(None),
    data_inicio: Optional[date] = Query(None, description="Data de abertura a partir de"),
    data_fim: Optional[date] = Query(None, description="Data de abertura até"),
    valor_min: Optional[Decimal] = Query(None, ge=0),
    valor_max: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """
    Listar licitações

    Usuário master vê as licitações de todas as prefeituras.
    """
    query = db.query(Licitacao).filter(Licitacao.deleted_at.is_(None))

    if not current_user.is_master:
        prefeitura_id = obter_ou_vincular_prefeitura(db, current_user)
        set_current_prefeitura_id(prefeitura_id)
        query = query.filter(Licitacao.prefeitura_id == prefeitura_id)

    query = apply_search_filter(query, search, Licitacao.numero_protocolo, Licitacao.objeto)
    query = apply_filters(query, [
        (modalidade.value if modalidade else None, Licitacao.modalidade, "eq"),
        (status.value if status else None, Licitacao.status, "eq"),
        (secretaria, Licitacao.secretaria, "like"),
        (data_inicio, Licitacao.data_abertura, "gte"),
        (data_fim, Licitacao.data_abertura, "lte"),
        (valor_min, Licitacao.valor_estimado, "gte"),
        (valor_max, Licitacao.valor_estimado, "lte"),
    ])

    items, total = paginate_query(
        query, page, limit,
        (Licitacao.created_at.desc(), Licitacao.id.desc())
    )
    return {
        "success": True,
        "data": [LicitacaoResponse.model_validate(l) for l in items],
        "pagination": pagination_meta(page, limit, total)
    }


@router.post("/", response_model=RespostaApi[LicitacaoResponse], status_code=201)
def criar_licitacao(
    licitacao: LicitacaoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Criar licitação

    O protocolo LIC-AAAA-MM-NNNNN segue a contagem de licitações do mês.
    """
    protocolo = gerar_numero_sequencial(
        db, Licitacao, Prefixos.LICITACAO, prefeitura_id,
        campo="numero_protocolo", por_periodo=True
    )

    db_licitacao = Licitacao(
        **licitacao.model_dump(),
        numero_protocolo=protocolo,
        prefeitura_id=prefeitura_id,
        criado_por=ator.id,
        atualizado_por=ator.id
    )
    db.add(db_licitacao)
    db.commit()
    db.refresh(db_licitacao)
    resposta = LicitacaoResponse.model_validate(db_licitacao)

    historico_service.registrar_criacao(
        db, db_licitacao.id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Criou a licitação {protocolo}",
        entidade=EntidadeHistorico.LICITACAO
    )

    return {
        "success": True,
        "data": resposta,
        "message": f"Licitação criada com sucesso! Protocolo: {protocolo}"
    }


@router.get("/{licitacao_id}", response_model=RespostaApi[LicitacaoResponse])
def obter_licitacao(
    licitacao_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    licitacao = _obter_licitacao(db, licitacao_id, prefeitura_id)
    return {"success": True, "data": LicitacaoResponse.model_validate(licitacao)}


@router.put("/{licitacao_id}", response_model=RespostaApi[LicitacaoResponse])
def atualizar_licitacao(
    licitacao_id: int,
    licitacao_update: LicitacaoUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    licitacao = _obter_licitacao(db, licitacao_id, prefeitura_id)

    dados = licitacao_update.model_dump(exclude_unset=True)
    anterior = snapshot(licitacao, CAMPOS_HISTORICO_LICITACAO)

    licitacao = update_entity(db, licitacao, {**dados, "atualizado_por": ator.id})
    resposta = LicitacaoResponse.model_validate(licitacao)

    historico_service.registrar_alteracoes(
        db, licitacao.id, prefeitura_id, ator, AbaHistorico.GERAL,
        anterior, dados, CAMPOS_HISTORICO_LICITACAO,
        entidade=EntidadeHistorico.LICITACAO
    )

    return {"success": True, "data": resposta, "message": "Licitação atualizada com sucesso"}


@router.get("/{licitacao_id}/historico", response_model=RespostaLista[HistoricoResponse])
def listar_historico_licitacao(
    licitacao_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    _obter_licitacao(db, licitacao_id, prefeitura_id)
    entradas = historico_service.listar_historico(
        db, licitacao_id, prefeitura_id, EntidadeHistorico.LICITACAO
    )
    return {
        "success": True,
        "data": [HistoricoResponse.model_validate(e) for e in entradas]
    }

"""
Rotas de Processos Administrativos (licitações e contratos)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
from sglc.api.deps import get_db, get_current_prefeitura_id, get_ator
from sglc.api.utils import (
    get_by_id, gerar_numero_sequencial, prefixo_do_tipo,
    paginate_query, pagination_meta, apply_search_filter,
    update_entity, snapshot, forbid_status
)
from sglc.core.exceptions import NotFoundError
from sglc.models.historico import AbaHistorico
from sglc.models.processo import ProcessoAdministrativo, TipoProcesso, StatusProcesso
from sglc.schemas.comum import RespostaApi, RespostaLista
from sglc.schemas.historico import HistoricoResponse
from sglc.schemas.processo import (
    ProcessoCreate, ProcessoUpdate, ProcessoResponse, CAMPOS_HISTORICO_PROCESSO
)
from sglc.services import historico_service
from sglc.services.historico_service import Ator

router = APIRouter()


def obter_processo(db: Session, processo_id: int, prefeitura_id: int) -> ProcessoAdministrativo:
    """Processo da prefeitura (inclusive arquivado) ou NotFoundError"""
    processo = get_by_id(db, ProcessoAdministrativo, processo_id, prefeitura_id, incluir_excluidos=True)
    if not processo:
        raise NotFoundError("Processo não encontrado")
    return processo


def obter_processo_editavel(db: Session, processo_id: int, prefeitura_id: int) -> ProcessoAdministrativo:
    """Processo que ainda aceita alterações (não arquivado)"""
    processo = obter_processo(db, processo_id, prefeitura_id)
    forbid_status(processo, StatusProcesso.ARQUIVADO, "Alteração")
    return processo


@router.get("/", response_model=RespostaLista[ProcessoResponse])
def listar_processos(
    tipo: Optional[TipoProcesso] = Query(None),
    status: Optional[StatusProcesso] = Query(None),
    search: Optional[str] = Query(None, description="Buscar por número, descrição ou fornecedor"),
    incluir_arquivados: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """Listar processos da prefeitura, mais recentes primeiro"""
    query = db.query(ProcessoAdministrativo).filter(
        ProcessoAdministrativo.prefeitura_id == prefeitura_id
    )

    if not incluir_arquivados:
        query = query.filter(ProcessoAdministrativo.deleted_at.is_(None))
    if tipo is not None:
        query = query.filter(ProcessoAdministrativo.tipo == tipo)
    if status is not None:
        query = query.filter(ProcessoAdministrativo.status == status)
    query = apply_search_filter(
        query, search,
        ProcessoAdministrativo.numero_processo,
        ProcessoAdministrativo.descricao,
        ProcessoAdministrativo.fornecedor
    )

    items, total = paginate_query(
        query, page, limit,
        (ProcessoAdministrativo.created_at.desc(), ProcessoAdministrativo.id.desc())
    )
    return {
        "success": True,
        "data": [ProcessoResponse.model_validate(p) for p in items],
        "pagination": pagination_meta(page, limit, total)
    }


@router.post("/", response_model=RespostaApi[ProcessoResponse], status_code=201)
def criar_processo(
    processo: ProcessoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Criar processo administrativo

    O número (CTR-/LIC-AAAA-MM-NNNNN) é gerado na mesma transação do
    processo; se a geração falhar, o processo não é criado.
    """
    numero = gerar_numero_sequencial(
        db, ProcessoAdministrativo, prefixo_do_tipo(processo.tipo), prefeitura_id
    )

    db_processo = ProcessoAdministrativo(
        **processo.model_dump(),
        numero_processo=numero,
        prefeitura_id=prefeitura_id,
        criado_por=ator.id,
        atualizado_por=ator.id
    )
    db.add(db_processo)
    db.commit()
    db.refresh(db_processo)
    resposta = ProcessoResponse.model_validate(db_processo)

    historico_service.registrar_criacao(
        db, db_processo.id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Criou o processo {numero}"
    )

    return {
        "success": True,
        "data": resposta,
        "message": f"Processo criado com sucesso! Número: {numero}"
    }


@router.get("/{processo_id}", response_model=RespostaApi[ProcessoResponse])
def obter_processo_por_id(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """Obter detalhes de um processo"""
    processo = obter_processo(db, processo_id, prefeitura_id)
    return {"success": True, "data": ProcessoResponse.model_validate(processo)}


@router.put("/{processo_id}", response_model=RespostaApi[ProcessoResponse])
def atualizar_processo(
    processo_id: int,
    processo_update: ProcessoUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Atualizar processo

    Cada campo alterado gera uma entrada no histórico (aba geral).
    """
    processo = obter_processo_editavel(db, processo_id, prefeitura_id)

    dados = processo_update.model_dump(exclude_unset=True)
    anterior = snapshot(processo, CAMPOS_HISTORICO_PROCESSO)

    processo = update_entity(db, processo, {**dados, "atualizado_por": ator.id})
    resposta = ProcessoResponse.model_validate(processo)

    historico_service.registrar_alteracoes(
        db, processo.id, prefeitura_id, ator, AbaHistorico.GERAL,
        anterior, dados, CAMPOS_HISTORICO_PROCESSO
    )

    return {"success": True, "data": resposta, "message": "Processo atualizado com sucesso"}


@router.delete("/{processo_id}", response_model=RespostaApi[ProcessoResponse])
def arquivar_processo(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Excluir processo

    Processos nunca são apagados: o status passa para ARQUIVADO e
    deleted_at é preenchido.
    """
    processo = obter_processo_editavel(db, processo_id, prefeitura_id)
    status_anterior = processo.status

    processo.status = StatusProcesso.ARQUIVADO
    processo.deleted_at = datetime.utcnow()
    processo.atualizado_por = ator.id
    db.commit()
    db.refresh(processo)
    resposta = ProcessoResponse.model_validate(processo)

    historico_service.registrar_exclusao(
        db, processo.id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Arquivou o processo {processo.numero_processo}",
        resumo=status_anterior.value
    )

    return {"success": True, "data": resposta, "message": "Processo arquivado com sucesso"}


@router.get("/{processo_id}/historico", response_model=RespostaLista[HistoricoResponse])
def listar_historico_processo(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """Histórico do processo e de seus sub-recursos, mais recente primeiro"""
    obter_processo(db, processo_id, prefeitura_id)
    entradas = historico_service.listar_historico(db, processo_id, prefeitura_id)
    return {
        "success": True,
        "data": [HistoricoResponse.model_validate(e) for e in entradas]
    }

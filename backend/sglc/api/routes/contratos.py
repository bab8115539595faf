"""
Rotas de Contratos
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import logging
from sglc.api.deps import get_db, get_current_prefeitura_id, get_ator
from sglc.api.utils import (
    get_by_id, validate_unique, gerar_numero_sequencial, Prefixos,
    paginate_query, pagination_meta, apply_filters,
    update_entity, snapshot
)
from sglc.core.exceptions import NotFoundError, ValidationError
from sglc.models.contrato import Contrato, StatusContrato
from sglc.models.historico import AbaHistorico, EntidadeHistorico
from sglc.schemas.comum import RespostaApi, RespostaLista, somente_digitos
from sglc.schemas.contrato import (
    ContratoCreate, ContratoUpdate, ContratoResponse, CAMPOS_HISTORICO_CONTRATO
)
from sglc.schemas.historico import HistoricoResponse
from sglc.services import historico_service
from sglc.services.historico_service import Ator

logger = logging.getLogger(__name__)

router = APIRouter()


def _obter_contrato(db: Session, contrato_id: int, prefeitura_id: int) -> Contrato:
    contrato = get_by_id(db, Contrato, contrato_id, prefeitura_id)
    if not contrato:
        raise NotFoundError("Contrato não encontrado")
    return contrato


@router.get("/", response_model=RespostaLista[ContratoResponse])
def listar_contratos(
    numero_contrato: Optional[str] = Query(None),
    cnpj_contratada: Optional[str] = Query(None),
    nome_contratada: Optional[str] = Query(None),
    status_contrato: Optional[StatusContrato] = Query(None),
    data_inicio: Optional[date] = Query(None, description="Assinados a partir de"),
    data_fim: Optional[date] = Query(None, description="Assinados até"),
    valor_min: Optional[Decimal] = Query(None, ge=0),
    valor_max: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """Listar contratos da prefeitura (excluídos não aparecem)"""
    query = db.query(Contrato).filter(
        Contrato.prefeitura_id == prefeitura_id,
        Contrato.deleted_at.is_(None)
    )

    query = apply_filters(query, [
        (numero_contrato, Contrato.numero_contrato, "like"),
        (somente_digitos(cnpj_contratada) if cnpj_contratada else None, Contrato.cnpj_contratada, "like"),
        (nome_contratada, Contrato.nome_contratada, "like"),
        (status_contrato.value if status_contrato else None, Contrato.status_contrato, "eq"),
        (data_inicio, Contrato.data_assinatura, "gte"),
        (data_fim, Contrato.data_assinatura, "lte"),
        (valor_min, Contrato.valor_total, "gte"),
        (valor_max, Contrato.valor_total, "lte"),
    ])

    items, total = paginate_query(
        query, page, limit,
        (Contrato.data_assinatura.desc(), Contrato.id.desc())
    )
    return {
        "success": True,
        "data": [ContratoResponse.model_validate(c) for c in items],
        "pagination": pagination_meta(page, limit, total)
    }


@router.post("/", response_model=RespostaApi[ContratoResponse], status_code=201)
def criar_contrato(
    contrato: ContratoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Criar contrato

    Sem numero_contrato informado, o sistema gera CTR-AAAA-MM-NNNNN.
    """
    dados = contrato.model_dump()

    if dados.get("numero_contrato"):
        validate_unique(
            db, Contrato, "numero_contrato", dados["numero_contrato"], prefeitura_id,
            display_name="Número de contrato"
        )
    else:
        dados["numero_contrato"] = gerar_numero_sequencial(
            db, Contrato, Prefixos.CONTRATO, prefeitura_id, campo="numero_contrato"
        )

    db_contrato = Contrato(
        **dados,
        prefeitura_id=prefeitura_id,
        criado_por=ator.id,
        atualizado_por=ator.id
    )
    db.add(db_contrato)
    db.commit()
    db.refresh(db_contrato)
    resposta = ContratoResponse.model_validate(db_contrato)

    historico_service.registrar_criacao(
        db, db_contrato.id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Criou o contrato {db_contrato.numero_contrato} com {db_contrato.nome_contratada}",
        entidade=EntidadeHistorico.CONTRATO
    )

    return {
        "success": True,
        "data": resposta,
        "message": f"Contrato criado com sucesso! Número: {db_contrato.numero_contrato}"
    }


@router.get("/{contrato_id}", response_model=RespostaApi[ContratoResponse])
def obter_contrato(
    contrato_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    contrato = _obter_contrato(db, contrato_id, prefeitura_id)
    return {"success": True, "data": ContratoResponse.model_validate(contrato)}


@router.put("/{contrato_id}", response_model=RespostaApi[ContratoResponse])
def atualizar_contrato(
    contrato_id: int,
    contrato_update: ContratoUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """
    Atualizar contrato

    As datas de vigência são validadas contra os valores já gravados
    quando apenas uma delas é enviada.
    """
    contrato = _obter_contrato(db, contrato_id, prefeitura_id)
    dados = contrato_update.model_dump(exclude_unset=True)

    inicio = dados.get("data_inicio_vigencia") or contrato.data_inicio_vigencia
    fim = dados.get("data_fim_vigencia") or contrato.data_fim_vigencia
    if fim < inicio:
        raise ValidationError("Data de fim da vigência deve ser posterior ao início")

    if dados.get("numero_contrato") and dados["numero_contrato"] != contrato.numero_contrato:
        validate_unique(
            db, Contrato, "numero_contrato", dados["numero_contrato"], prefeitura_id,
            exclude_id=contrato.id, display_name="Número de contrato"
        )

    anterior = snapshot(contrato, CAMPOS_HISTORICO_CONTRATO)
    contrato = update_entity(db, contrato, {**dados, "atualizado_por": ator.id})
    resposta = ContratoResponse.model_validate(contrato)

    historico_service.registrar_alteracoes(
        db, contrato.id, prefeitura_id, ator, AbaHistorico.GERAL,
        anterior, dados, CAMPOS_HISTORICO_CONTRATO,
        entidade=EntidadeHistorico.CONTRATO
    )

    return {"success": True, "data": resposta, "message": "Contrato atualizado com sucesso"}


@router.delete("/{contrato_id}", response_model=RespostaApi[ContratoResponse])
def excluir_contrato(
    contrato_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """Exclusão lógica: o contrato recebe deleted_at e deixa de ser listado"""
    contrato = _obter_contrato(db, contrato_id, prefeitura_id)

    contrato.deleted_at = datetime.utcnow()
    contrato.atualizado_por = ator.id
    db.commit()
    db.refresh(contrato)
    resposta = ContratoResponse.model_validate(contrato)
    logger.info("Contrato %s excluído pelo usuário %s", contrato.numero_contrato, ator.id)

    historico_service.registrar_exclusao(
        db, contrato.id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Excluiu o contrato {contrato.numero_contrato}",
        resumo=contrato.numero_contrato,
        entidade=EntidadeHistorico.CONTRATO
    )

    return {"success": True, "data": resposta, "message": "Contrato excluído com sucesso"}


@router.get("/{contrato_id}/historico", response_model=RespostaLista[HistoricoResponse])
def listar_historico_contrato(
    contrato_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """Histórico do contrato (também disponível após a exclusão lógica)"""
    contrato = get_by_id(db, Contrato, contrato_id, prefeitura_id, incluir_excluidos=True)
    if not contrato:
        raise NotFoundError("Contrato não encontrado")

    entradas = historico_service.listar_historico(
        db, contrato_id, prefeitura_id, EntidadeHistorico.CONTRATO
    )
    return {
        "success": True,
        "data": [HistoricoResponse.model_validate(e) for e in entradas]
    }

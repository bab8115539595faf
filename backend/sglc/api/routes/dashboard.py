"""
Rotas do Dashboard - Estatísticas de licitações e contratos
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Dict, Optional
from pydantic import BaseModel
from datetime import date, timedelta
from decimal import Decimal
from sglc.api.deps import get_db, get_current_prefeitura_id
from sglc.models.contrato import Contrato, StatusContrato
from sglc.models.licitacao import Licitacao
from sglc.models.processo import ProcessoAdministrativo
from sglc.schemas.comum import RespostaApi

router = APIRouter()


# ============ SCHEMAS ============

class AgrupamentoResponse(BaseModel):
    chave: str
    quantidade: int
    valor_estimado: Decimal


class ContratoVencendoResponse(BaseModel):
    id: int
    numero_contrato: str
    nome_contratada: str
    data_fim_vigencia: date
    dias_restantes: int
    valor_total: Decimal


class DashboardResponse(BaseModel):
    licitacoes_por_status: Dict[str, int]
    total_licitacoes: int
    valor_estimado_total: Decimal
    por_modalidade: List[AgrupamentoResponse]
    por_secretaria: List[AgrupamentoResponse]
    processos_por_status: Dict[str, int]
    contratos_vigentes: int
    contratos_vencendo: List[ContratoVencendoResponse]


# ============ HELPERS ============

def _agrupar_licitacoes(db: Session, prefeitura_id: int, coluna) -> List[AgrupamentoResponse]:
    linhas = db.query(
        coluna,
        func.count(Licitacao.id),
        func.coalesce(func.sum(Licitacao.valor_estimado), 0)
    ).filter(
        Licitacao.prefeitura_id == prefeitura_id,
        Licitacao.deleted_at.is_(None)
    ).group_by(coluna).order_by(func.count(Licitacao.id).desc(), coluna).all()

    return [
        AgrupamentoResponse(chave=chave, quantidade=quantidade, valor_estimado=Decimal(str(valor)))
        for chave, quantidade, valor in linhas
    ]


# ============ ENDPOINTS ============

@router.get("/", response_model=RespostaApi[DashboardResponse])
def obter_dashboard(
    dias_vencimento: int = Query(90, ge=1, le=365),
    hoje: Optional[date] = Query(None, include_in_schema=False),
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    """
    Painel da prefeitura

    Retorna:
    - Licitações por status e valor estimado total
    - Agrupamentos por modalidade e por secretaria
    - Processos por status
    - Contratos vigentes que vencem nos próximos dias_vencimento dias
    """
    hoje = hoje or date.today()

    licitacoes_por_status = dict(
        db.query(Licitacao.status, func.count(Licitacao.id)).filter(
            Licitacao.prefeitura_id == prefeitura_id,
            Licitacao.deleted_at.is_(None)
        ).group_by(Licitacao.status).all()
    )

    valor_estimado_total = db.query(
        func.coalesce(func.sum(Licitacao.valor_estimado), 0)
    ).filter(
        Licitacao.prefeitura_id == prefeitura_id,
        Licitacao.deleted_at.is_(None)
    ).scalar()

    processos_por_status = {
        status.value: quantidade
        for status, quantidade in db.query(
            ProcessoAdministrativo.status, func.count(ProcessoAdministrativo.id)
        ).filter(
            ProcessoAdministrativo.prefeitura_id == prefeitura_id
        ).group_by(ProcessoAdministrativo.status).all()
    }

    contratos_ativos = db.query(Contrato).filter(
        Contrato.prefeitura_id == prefeitura_id,
        Contrato.deleted_at.is_(None),
        Contrato.status_contrato == StatusContrato.VIGENTE.value
    )

    vencendo = contratos_ativos.filter(
        Contrato.data_fim_vigencia >= hoje,
        Contrato.data_fim_vigencia <= hoje + timedelta(days=dias_vencimento)
    ).order_by(Contrato.data_fim_vigencia, Contrato.id).all()

    painel = DashboardResponse(
        licitacoes_por_status=licitacoes_por_status,
        total_licitacoes=sum(licitacoes_por_status.values()),
        valor_estimado_total=Decimal(str(valor_estimado_total)),
        por_modalidade=_agrupar_licitacoes(db, prefeitura_id, Licitacao.modalidade),
        por_secretaria=_agrupar_licitacoes(db, prefeitura_id, Licitacao.secretaria),
        processos_por_status=processos_por_status,
        contratos_vigentes=contratos_ativos.count(),
        contratos_vencendo=[
            ContratoVencendoResponse(
                id=c.id,
                numero_contrato=c.numero_contrato,
                nome_contratada=c.nome_contratada,
                data_fim_vigencia=c.data_fim_vigencia,
                dias_restantes=(c.data_fim_vigencia - hoje).days,
                valor_total=c.valor_total
            )
            for c in vencendo
        ]
    )
    return {"success": True, "data": painel}

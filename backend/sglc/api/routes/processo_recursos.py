"""
Rotas dos sub-recursos do processo administrativo

Documentos, financeiro, notas fiscais, fiscais, fiscalização,
observações e pagamentos. Toda escrita gera entrada no histórico do
processo (financeiro e pagamentos na aba financeiro, notas fiscais na aba
notas_fiscais, o restante na aba geral).
"""
from datetime import date
from typing import Type

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sglc.api.deps import get_db, get_current_prefeitura_id, get_current_user, get_ator
from sglc.api.routes.processos import obter_processo, obter_processo_editavel
from sglc.api.utils import get_by_id, update_entity, snapshot
from sglc.core.exceptions import NotFoundError
from sglc.core.formatacao import formatar_moeda
from sglc.models.historico import AbaHistorico
from sglc.models.processo_recursos import (
    ProcessoDocumento, ProcessoFinanceiro, ProcessoNotaFiscal, ProcessoFiscal,
    ProcessoFiscalizacao, ProcessoObservacao, ProcessoPagamento
)
from sglc.models.usuario import Usuario
from sglc.schemas.comum import RespostaApi, RespostaLista
from sglc.schemas.processo_recursos import (
    DocumentoCreate, DocumentoResponse,
    FinanceiroCreate, FinanceiroUpdate, FinanceiroResponse, CAMPOS_HISTORICO_FINANCEIRO,
    NotaFiscalCreate, NotaFiscalUpdate, NotaFiscalResponse, CAMPOS_HISTORICO_NOTA,
    FiscalCreate, FiscalUpdate, FiscalResponse,
    FiscalizacaoCreate, FiscalizacaoResponse,
    ObservacaoCreate, ObservacaoResponse,
    PagamentoCreate, PagamentoResponse,
)
from sglc.services import historico_service
from sglc.services.historico_service import Ator

router = APIRouter()


def _listar(db: Session, model: Type, processo_id: int, prefeitura_id: int, *order_by) -> list:
    obter_processo(db, processo_id, prefeitura_id)
    query = db.query(model).filter(
        model.processo_id == processo_id,
        model.prefeitura_id == prefeitura_id
    )
    return query.order_by(*(order_by or (model.created_at.desc(), model.id.desc()))).all()


def _criar(db: Session, model: Type, processo_id: int, prefeitura_id: int, **dados):
    registro = model(processo_id=processo_id, prefeitura_id=prefeitura_id, **dados)
    db.add(registro)
    db.commit()
    db.refresh(registro)
    return registro


def _obter_filho(db: Session, model: Type, registro_id: int, processo_id: int, prefeitura_id: int, nome: str):
    registro = get_by_id(db, model, registro_id, prefeitura_id, processo_id=processo_id)
    if not registro:
        raise NotFoundError(f"{nome} não encontrado(a)")
    return registro


# ============ DOCUMENTOS ============

@router.get("/{processo_id}/documentos", response_model=RespostaLista[DocumentoResponse])
def listar_documentos(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    documentos = _listar(db, ProcessoDocumento, processo_id, prefeitura_id)
    return {"success": True, "data": [DocumentoResponse.model_validate(d) for d in documentos]}


@router.post("/{processo_id}/documentos", response_model=RespostaApi[DocumentoResponse], status_code=201)
def anexar_documento(
    processo_id: int,
    documento: DocumentoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """Registrar documento já enviado ao storage (apenas metadados e URL)"""
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _criar(
        db, ProcessoDocumento, processo_id, prefeitura_id,
        **documento.model_dump(), usuario_id=ator.id, usuario_nome=ator.nome
    )
    resposta = DocumentoResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Anexou documento {registro.nome_arquivo} ({registro.tipo_documento})"
    )
    return {"success": True, "data": resposta, "message": "Documento anexado com sucesso"}


# ============ FINANCEIRO ============

@router.get("/{processo_id}/financeiro", response_model=RespostaLista[FinanceiroResponse])
def listar_movimentacoes(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    movimentacoes = _listar(
        db, ProcessoFinanceiro, processo_id, prefeitura_id,
        ProcessoFinanceiro.data.desc(), ProcessoFinanceiro.id.desc()
    )
    return {"success": True, "data": [FinanceiroResponse.model_validate(m) for m in movimentacoes]}


@router.post("/{processo_id}/financeiro", response_model=RespostaApi[FinanceiroResponse], status_code=201)
def adicionar_movimentacao(
    processo_id: int,
    movimentacao: FinanceiroCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _criar(db, ProcessoFinanceiro, processo_id, prefeitura_id, **movimentacao.model_dump())
    resposta = FinanceiroResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.FINANCEIRO,
        f"Adicionou movimentação financeira: {registro.tipo} de {formatar_moeda(registro.valor)}"
    )
    return {"success": True, "data": resposta, "message": "Movimentação adicionada com sucesso"}


@router.put("/{processo_id}/financeiro/{movimentacao_id}", response_model=RespostaApi[FinanceiroResponse])
def atualizar_movimentacao(
    processo_id: int,
    movimentacao_id: int,
    movimentacao_update: FinanceiroUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _obter_filho(db, ProcessoFinanceiro, movimentacao_id, processo_id, prefeitura_id, "Movimentação")

    dados = movimentacao_update.model_dump(exclude_unset=True)
    anterior = snapshot(registro, CAMPOS_HISTORICO_FINANCEIRO)
    registro = update_entity(db, registro, dados)
    resposta = FinanceiroResponse.model_validate(registro)

    historico_service.registrar_alteracoes(
        db, processo_id, prefeitura_id, ator, AbaHistorico.FINANCEIRO,
        anterior, dados, CAMPOS_HISTORICO_FINANCEIRO,
        contexto=f"Movimentação financeira ({anterior['tipo']})"
    )
    return {"success": True, "data": resposta, "message": "Movimentação atualizada com sucesso"}


@router.delete("/{processo_id}/financeiro/{movimentacao_id}", response_model=RespostaApi[FinanceiroResponse])
def remover_movimentacao(
    processo_id: int,
    movimentacao_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """Remover movimentação; o histórico só é gravado se a exclusão for confirmada"""
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _obter_filho(db, ProcessoFinanceiro, movimentacao_id, processo_id, prefeitura_id, "Movimentação")
    resposta = FinanceiroResponse.model_validate(registro)

    db.delete(registro)
    db.commit()

    historico_service.registrar_exclusao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.FINANCEIRO,
        f"Removeu movimentação financeira: {resposta.tipo} de {formatar_moeda(resposta.valor)}",
        resumo=f"{resposta.tipo} | {resposta.valor:.2f}"
    )
    return {"success": True, "data": resposta, "message": "Movimentação removida com sucesso"}


# ============ NOTAS FISCAIS ============

@router.get("/{processo_id}/notas-fiscais", response_model=RespostaLista[NotaFiscalResponse])
def listar_notas_fiscais(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    notas = _listar(
        db, ProcessoNotaFiscal, processo_id, prefeitura_id,
        ProcessoNotaFiscal.data_emissao.desc(), ProcessoNotaFiscal.id.desc()
    )
    return {"success": True, "data": [NotaFiscalResponse.model_validate(n) for n in notas]}


@router.post("/{processo_id}/notas-fiscais", response_model=RespostaApi[NotaFiscalResponse], status_code=201)
def cadastrar_nota_fiscal(
    processo_id: int,
    nota: NotaFiscalCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _criar(db, ProcessoNotaFiscal, processo_id, prefeitura_id, **nota.model_dump())
    resposta = NotaFiscalResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.NOTAS_FISCAIS,
        f"Cadastrou nota fiscal nº {registro.numero_nota} no valor de {formatar_moeda(registro.valor)}"
    )
    return {"success": True, "data": resposta, "message": "Nota fiscal cadastrada com sucesso"}


@router.put("/{processo_id}/notas-fiscais/{nota_id}", response_model=RespostaApi[NotaFiscalResponse])
def atualizar_nota_fiscal(
    processo_id: int,
    nota_id: int,
    nota_update: NotaFiscalUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _obter_filho(db, ProcessoNotaFiscal, nota_id, processo_id, prefeitura_id, "Nota fiscal")

    dados = nota_update.model_dump(exclude_unset=True)
    anterior = snapshot(registro, CAMPOS_HISTORICO_NOTA)
    registro = update_entity(db, registro, dados)
    resposta = NotaFiscalResponse.model_validate(registro)

    historico_service.registrar_alteracoes(
        db, processo_id, prefeitura_id, ator, AbaHistorico.NOTAS_FISCAIS,
        anterior, dados, CAMPOS_HISTORICO_NOTA,
        contexto=f"Nota fiscal nº {anterior['numero_nota']}"
    )
    return {"success": True, "data": resposta, "message": "Nota fiscal atualizada com sucesso"}


@router.delete("/{processo_id}/notas-fiscais/{nota_id}", response_model=RespostaApi[NotaFiscalResponse])
def excluir_nota_fiscal(
    processo_id: int,
    nota_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    """Excluir nota fiscal; o histórico só é gravado se a exclusão for confirmada"""
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _obter_filho(db, ProcessoNotaFiscal, nota_id, processo_id, prefeitura_id, "Nota fiscal")
    resposta = NotaFiscalResponse.model_validate(registro)

    db.delete(registro)
    db.commit()

    historico_service.registrar_exclusao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.NOTAS_FISCAIS,
        f"Deletou nota fiscal nº {resposta.numero_nota} no valor de {formatar_moeda(resposta.valor)}",
        resumo=f"{resposta.numero_nota} | {resposta.valor:.2f}"
    )
    return {"success": True, "data": resposta, "message": "Nota fiscal excluída com sucesso"}


# ============ FISCAIS ============

@router.get("/{processo_id}/fiscais", response_model=RespostaLista[FiscalResponse])
def listar_fiscais(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    fiscais = _listar(db, ProcessoFiscal, processo_id, prefeitura_id, ProcessoFiscal.nome, ProcessoFiscal.id)
    return {"success": True, "data": [FiscalResponse.model_validate(f) for f in fiscais]}


@router.post("/{processo_id}/fiscais", response_model=RespostaApi[FiscalResponse], status_code=201)
def designar_fiscal(
    processo_id: int,
    fiscal: FiscalCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _criar(db, ProcessoFiscal, processo_id, prefeitura_id, **fiscal.model_dump())
    resposta = FiscalResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Designou fiscal {registro.nome} ({registro.cargo}) como {registro.tipo_fiscal}"
    )
    return {"success": True, "data": resposta, "message": "Fiscal designado com sucesso"}


@router.put("/{processo_id}/fiscais/{fiscal_id}", response_model=RespostaApi[FiscalResponse])
def atualizar_fiscal(
    processo_id: int,
    fiscal_id: int,
    fiscal_update: FiscalUpdate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _obter_filho(db, ProcessoFiscal, fiscal_id, processo_id, prefeitura_id, "Fiscal")

    dados = fiscal_update.model_dump(exclude_unset=True)
    campos = list(FiscalUpdate.model_fields)
    anterior = snapshot(registro, campos)
    registro = update_entity(db, registro, dados)
    resposta = FiscalResponse.model_validate(registro)

    historico_service.registrar_alteracoes(
        db, processo_id, prefeitura_id, ator, AbaHistorico.GERAL,
        anterior, dados, campos,
        contexto=f"Fiscal {anterior['nome']}"
    )
    return {"success": True, "data": resposta, "message": "Fiscal atualizado com sucesso"}


# ============ FISCALIZAÇÃO ============

@router.get("/{processo_id}/fiscalizacao", response_model=RespostaLista[FiscalizacaoResponse])
def listar_fiscalizacoes(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    registros = _listar(db, ProcessoFiscalizacao, processo_id, prefeitura_id)
    return {"success": True, "data": [FiscalizacaoResponse.model_validate(r) for r in registros]}


@router.post("/{processo_id}/fiscalizacao", response_model=RespostaApi[FiscalizacaoResponse], status_code=201)
def registrar_fiscalizacao(
    processo_id: int,
    fiscalizacao: FiscalizacaoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    registro = _criar(db, ProcessoFiscalizacao, processo_id, prefeitura_id, **fiscalizacao.model_dump())
    resposta = FiscalizacaoResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.GERAL,
        f"Registrou fiscalização: {registro.tipo} ({registro.status})"
    )
    return {"success": True, "data": resposta, "message": "Fiscalização registrada com sucesso"}


# ============ OBSERVAÇÕES ============

@router.get("/{processo_id}/observacoes", response_model=RespostaLista[ObservacaoResponse])
def listar_observacoes(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    observacoes = _listar(db, ProcessoObservacao, processo_id, prefeitura_id)
    return {"success": True, "data": [ObservacaoResponse.model_validate(o) for o in observacoes]}


@router.post("/{processo_id}/observacoes", response_model=RespostaApi[ObservacaoResponse], status_code=201)
def adicionar_observacao(
    processo_id: int,
    observacao: ObservacaoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    current_user: Usuario = Depends(get_current_user)
):
    # Observações são aceitas inclusive em processos arquivados
    obter_processo(db, processo_id, prefeitura_id)
    ator = Ator.do_usuario(current_user)
    registro = _criar(
        db, ProcessoObservacao, processo_id, prefeitura_id,
        conteudo=observacao.conteudo,
        usuario_id=current_user.id,
        usuario_nome=current_user.nome_completo,
        usuario_email=current_user.email
    )
    resposta = ObservacaoResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.GERAL, "Adicionou observação"
    )
    return {"success": True, "data": resposta, "message": "Observação adicionada com sucesso"}


# ============ PAGAMENTOS ============

@router.get("/{processo_id}/pagamentos", response_model=RespostaLista[PagamentoResponse])
def listar_pagamentos(
    processo_id: int,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id)
):
    pagamentos = _listar(
        db, ProcessoPagamento, processo_id, prefeitura_id,
        ProcessoPagamento.data_pagamento.desc(), ProcessoPagamento.id.desc()
    )
    return {"success": True, "data": [PagamentoResponse.model_validate(p) for p in pagamentos]}


@router.post("/{processo_id}/pagamentos", response_model=RespostaApi[PagamentoResponse], status_code=201)
def registrar_pagamento(
    processo_id: int,
    pagamento: PagamentoCreate,
    db: Session = Depends(get_db),
    prefeitura_id: int = Depends(get_current_prefeitura_id),
    ator: Ator = Depends(get_ator)
):
    obter_processo_editavel(db, processo_id, prefeitura_id)
    dados = pagamento.model_dump()
    dados["data_pagamento"] = dados["data_pagamento"] or date.today()
    registro = _criar(db, ProcessoPagamento, processo_id, prefeitura_id, **dados)
    resposta = PagamentoResponse.model_validate(registro)

    historico_service.registrar_criacao(
        db, processo_id, prefeitura_id, ator, AbaHistorico.FINANCEIRO,
        f"Registrou pagamento ({registro.tipo_pagamento}) de {formatar_moeda(registro.valor)}"
    )
    return {"success": True, "data": resposta, "message": "Pagamento registrado com sucesso"}

"""
Serviço de Histórico - trilha de auditoria dos processos

Registra criações, alterações e exclusões de processos, licitações,
contratos e seus sub-recursos na tabela processo_historico.

As gravações são "best effort": rodam depois do commit do registro
principal e nunca levantam exceção. Em caso de falha o erro é registrado
no log e a função devolve ResultadoHistorico(sucesso=False, ...); cabe à
rota decidir ignorar o resultado.

Alterações geram UMA entrada por campo alterado, com valor anterior e
novo gravados em formato bruto ("1000.00", "2025-03-15") e descrição
legível em pt-BR ("Alterou valor total de "R$ 1.000,00" para "R$ 1.500,50"").
"""
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sglc.core.exceptions import AuditWriteError, BackendError
from sglc.core.formatacao import formatar_data, formatar_moeda, quantizar
from sglc.core.resilience import retry_leitura, tabela_inexistente
from sglc.models.historico import (
    ProcessoHistorico, AbaHistorico, AcaoHistorico, EntidadeHistorico
)

logger = logging.getLogger(__name__)


# Nomes legíveis dos campos nas descrições
ROTULOS_CAMPOS = {
    "numero_processo": "número do processo",
    "tipo": "tipo",
    "status": "status",
    "descricao": "descrição",
    "data_abertura": "data de abertura",
    "data_encerramento": "data de encerramento",
    "data_encerramento_prevista": "data de encerramento prevista",
    "valor_estimado": "valor estimado",
    "valor_total": "valor total",
    "valor_pago": "valor pago",
    "numero_nota": "número da nota",
    "data_emissao": "data de emissão",
    "data_vencimento": "data de vencimento",
    "valor": "valor",
    "status_pagamento": "status de pagamento",
    "status_contrato": "status do contrato",
    "numero_contrato": "número do contrato",
    "objeto": "objeto",
    "secretaria": "secretaria",
    "responsavel": "responsável",
    "data_inicio_vigencia": "início da vigência",
    "data_fim_vigencia": "fim da vigência",
    "nome_contratada": "contratada",
    "cnpj_contratada": "CNPJ da contratada",
    "observacoes": "observações",
}

CAMPOS_MONETARIOS = {"valor", "valor_total", "valor_pago", "valor_estimado"}


class Ator(NamedTuple):
    """Usuário que executou a ação (nome gravado no momento da ação)"""
    id: Optional[int]
    nome: Optional[str]

    @classmethod
    def do_usuario(cls, usuario) -> "Ator":
        return cls(id=usuario.id, nome=usuario.nome_completo)


class Alteracao(NamedTuple):
    campo: str
    valor_anterior: Optional[str]
    valor_novo: Optional[str]
    descricao: str


class ResultadoHistorico(NamedTuple):
    """Resultado de uma gravação de histórico"""
    sucesso: bool
    registros: int = 0
    mensagem: Optional[str] = None


# ============ FORMATAÇÃO ============

def formatar_nome_campo(campo: str) -> str:
    """valor_total -> 'valor total'"""
    return ROTULOS_CAMPOS.get(campo, campo.replace("_", " "))


def _eh_campo_data(campo: str) -> bool:
    return campo == "data" or campo.startswith("data_")


def normalizar_valor(campo: str, valor: Any) -> Optional[str]:
    """
    Converte o valor para a forma gravada em valor_anterior/valor_novo.

    Vazio vira None; valores monetários ficam com duas casas ("1000.00");
    datas em ISO ("2025-03-15"); enums pelo valor.
    """
    if valor is None:
        return None
    if isinstance(valor, Enum):
        valor = valor.value
    if isinstance(valor, str):
        valor = valor.strip()
        if not valor:
            return None

    if campo in CAMPOS_MONETARIOS and not isinstance(valor, bool):
        try:
            return f"{quantizar(valor):.2f}"
        except (InvalidOperation, ValueError):
            return str(valor)

    if isinstance(valor, datetime):
        return valor.isoformat()
    if isinstance(valor, date):
        return valor.isoformat()
    if isinstance(valor, str) and _eh_campo_data(campo):
        try:
            return date.fromisoformat(valor[:10]).isoformat()
        except ValueError:
            return valor

    if isinstance(valor, Decimal):
        return format(valor, "f")
    return str(valor)


def exibir_valor(campo: str, valor: Optional[str]) -> Optional[str]:
    """Forma legível (pt-BR) de um valor normalizado"""
    if valor is None:
        return None
    if campo in CAMPOS_MONETARIOS:
        try:
            return formatar_moeda(valor)
        except (InvalidOperation, ValueError):
            return valor
    if _eh_campo_data(campo):
        try:
            return formatar_data(valor)
        except ValueError:
            return valor
    return valor


def gerar_descricao_alteracao(campo: str, anterior: Optional[str], novo: Optional[str]) -> str:
    """
    Descrição de uma alteração de campo.

    - anterior ausente: Definiu {campo} como "{novo}"
    - novo ausente: Removeu {campo} (era "{anterior}")
    - ambos presentes: Alterou {campo} de "{anterior}" para "{novo}"
    """
    nome = formatar_nome_campo(campo)
    if anterior is None:
        return f'Definiu {nome} como "{novo}"'
    if novo is None:
        return f'Removeu {nome} (era "{anterior}")'
    return f'Alterou {nome} de "{anterior}" para "{novo}"'


def calcular_alteracoes(
    anterior: Dict[str, Any],
    novo: Dict[str, Any],
    campos: Optional[Iterable[str]] = None
) -> List[Alteracao]:
    """
    Compara o registro anterior com os dados novos.

    Só são comparados os campos presentes em `novo` (e em `campos`, se
    informado). A comparação é por valor normalizado: Decimal("1000") e
    1000.00 são iguais, assim como "2025-03-15" e date(2025, 3, 15).
    """
    interesse = list(campos) if campos is not None else list(novo.keys())
    alteracoes = []

    for campo in interesse:
        if campo not in novo:
            continue
        valor_anterior = normalizar_valor(campo, anterior.get(campo))
        valor_novo = normalizar_valor(campo, novo.get(campo))
        if valor_anterior == valor_novo:
            continue

        descricao = gerar_descricao_alteracao(
            campo,
            exibir_valor(campo, valor_anterior),
            exibir_valor(campo, valor_novo),
        )
        alteracoes.append(Alteracao(campo, valor_anterior, valor_novo, descricao))

    return alteracoes


# ============ GRAVAÇÃO ============

def _novo_registro(
    processo_id: int,
    prefeitura_id: int,
    ator: Ator,
    aba: AbaHistorico,
    acao: AcaoHistorico,
    descricao: str,
    entidade: EntidadeHistorico,
    campo_alterado: Optional[str] = None,
    valor_anterior: Optional[str] = None,
    valor_novo: Optional[str] = None,
) -> ProcessoHistorico:
    return ProcessoHistorico(
        processo_id=processo_id,
        entidade=EntidadeHistorico(entidade).value,
        prefeitura_id=prefeitura_id,
        usuario_id=ator.id,
        usuario_nome=ator.nome,
        aba=AbaHistorico(aba).value,
        acao=AcaoHistorico(acao).value,
        campo_alterado=campo_alterado,
        valor_anterior=valor_anterior,
        valor_novo=valor_novo,
        descricao=descricao,
    )


def _gravar(db: Session, registros: List[ProcessoHistorico]) -> ResultadoHistorico:
    """Grava as entradas em transação própria; falhas viram ResultadoHistorico"""
    try:
        db.add_all(registros)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        if tabela_inexistente(e):
            logger.warning("Tabela processo_historico não existe; histórico não registrado")
            return ResultadoHistorico(False, 0, "Histórico não disponível")

        erro = AuditWriteError(details=str(e))
        logger.error("%s: %s", erro.message, erro.details)
        return ResultadoHistorico(False, 0, erro.message)

    return ResultadoHistorico(True, len(registros))


def registrar_criacao(
    db: Session,
    processo_id: int,
    prefeitura_id: int,
    ator: Ator,
    aba: AbaHistorico,
    descricao: str,
    entidade: EntidadeHistorico = EntidadeHistorico.PROCESSO
) -> ResultadoHistorico:
    """Registra a criação de um registro (acao=criou)"""
    registro = _novo_registro(
        processo_id, prefeitura_id, ator, aba, AcaoHistorico.CRIOU, descricao, entidade
    )
    return _gravar(db, [registro])


def registrar_alteracoes(
    db: Session,
    processo_id: int,
    prefeitura_id: int,
    ator: Ator,
    aba: AbaHistorico,
    anterior: Dict[str, Any],
    novo: Dict[str, Any],
    campos: Optional[Iterable[str]] = None,
    contexto: Optional[str] = None,
    entidade: EntidadeHistorico = EntidadeHistorico.PROCESSO
) -> ResultadoHistorico:
    """
    Registra uma entrada por campo alterado (acao=alterou).

    Args:
        anterior: Valores antes da atualização (ver utils.updates.snapshot)
        novo: Dados enviados na atualização
        campos: Campos de interesse (default: todos os de `novo`)
        contexto: Prefixo da descrição (ex: "Nota fiscal nº 123")

    Sem alterações, nada é gravado e o resultado traz registros=0.
    """
    alteracoes = calcular_alteracoes(anterior, novo, campos)
    if not alteracoes:
        return ResultadoHistorico(True, 0, "Nenhuma alteração")

    registros = [
        _novo_registro(
            processo_id, prefeitura_id, ator, aba, AcaoHistorico.ALTEROU,
            f"{contexto}: {alt.descricao}" if contexto else alt.descricao,
            entidade,
            campo_alterado=alt.campo,
            valor_anterior=alt.valor_anterior,
            valor_novo=alt.valor_novo,
        )
        for alt in alteracoes
    ]
    return _gravar(db, registros)


def registrar_exclusao(
    db: Session,
    processo_id: int,
    prefeitura_id: int,
    ator: Ator,
    aba: AbaHistorico,
    descricao: str,
    resumo: Optional[str] = None,
    entidade: EntidadeHistorico = EntidadeHistorico.PROCESSO
) -> ResultadoHistorico:
    """
    Registra uma exclusão (acao=deletou).

    Só deve ser chamado depois que a exclusão foi confirmada (commit).
    `resumo` guarda o que foi removido em valor_anterior.
    """
    registro = _novo_registro(
        processo_id, prefeitura_id, ator, aba, AcaoHistorico.DELETOU, descricao, entidade,
        valor_anterior=resumo,
    )
    return _gravar(db, [registro])


# ============ LEITURA ============

@retry_leitura
def _consultar_historico(
    db: Session,
    processo_id: int,
    prefeitura_id: int,
    entidade: str
) -> List[ProcessoHistorico]:
    return db.query(ProcessoHistorico).filter(
        ProcessoHistorico.processo_id == processo_id,
        ProcessoHistorico.prefeitura_id == prefeitura_id,
        ProcessoHistorico.entidade == entidade
    ).order_by(
        ProcessoHistorico.criado_em.desc(),
        ProcessoHistorico.id.desc()
    ).all()


def listar_historico(
    db: Session,
    processo_id: int,
    prefeitura_id: int,
    entidade: EntidadeHistorico = EntidadeHistorico.PROCESSO
) -> List[ProcessoHistorico]:
    """
    Lista o histórico do registro, mais recente primeiro.

    Se a tabela processo_historico ainda não existe no banco, retorna
    lista vazia. Demais falhas sobem como BackendError.
    """
    try:
        return _consultar_historico(
            db, processo_id, prefeitura_id, EntidadeHistorico(entidade).value
        )
    except SQLAlchemyError as e:
        db.rollback()
        if tabela_inexistente(e):
            logger.info("Tabela processo_historico não existe; retornando histórico vazio")
            return []
        logger.error("Erro ao buscar histórico do processo %s: %s", processo_id, e)
        raise BackendError("Erro ao buscar histórico", details=str(e)) from e

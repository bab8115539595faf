"""
Sequencers - Geradores de números sequenciais

IMPORTANTE: Usa a tabela 'sequencias' como contador atômico. A linha do
escopo (prefeitura, tabela, prefixo, ano, mês) é lida com SELECT ... FOR
UPDATE antes do incremento, de modo que duas criações simultâneas nunca
recebem o mesmo número. Os números também nunca se repetem quando
registros são excluídos.
"""
import logging
from datetime import datetime
from typing import Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sglc.core.exceptions import AllocationError
from sglc.models.processo import TipoProcesso
from sglc.models.sequencia import Sequencia

logger = logging.getLogger(__name__)

T = TypeVar('T')


# Constantes de prefixos para padronização
class Prefixos:
    LICITACAO = "LIC"
    CONTRATO = "CTR"


PREFIXO_POR_TIPO = {
    TipoProcesso.LICITACAO: Prefixos.LICITACAO,
    TipoProcesso.CONTRATO: Prefixos.CONTRATO,
}


def prefixo_do_tipo(tipo: TipoProcesso) -> str:
    """contrato -> CTR, licitação -> LIC"""
    return PREFIXO_POR_TIPO[TipoProcesso(tipo)]


def _inicio_do_mes(ano: int, mes: int) -> datetime:
    return datetime(ano, mes, 1)


def _inicio_do_proximo_mes(ano: int, mes: int) -> datetime:
    if mes == 12:
        return datetime(ano + 1, 1, 1)
    return datetime(ano, mes + 1, 1)


def _buscar_sequencia(
    db: Session,
    prefeitura_id: int,
    entidade: str,
    prefixo: str,
    ano: int,
    mes: int
) -> Optional[Sequencia]:
    return db.query(Sequencia).filter(
        Sequencia.prefeitura_id == prefeitura_id,
        Sequencia.entidade == entidade,
        Sequencia.prefixo == prefixo,
        Sequencia.ano == ano,
        Sequencia.mes == mes
    ).with_for_update().first()


def _maior_sufixo_existente(db: Session, model, campo: str, prefeitura_id: int, base: str) -> int:
    """Maior sufixo numérico já gravado com o prefixo do escopo (migração de dados antigos)"""
    coluna = getattr(model, campo)
    ultimo_existente = db.query(func.max(coluna)).filter(
        model.prefeitura_id == prefeitura_id,
        coluna.like(f"{base}%")
    ).scalar()

    if not ultimo_existente:
        return 0
    try:
        return int(ultimo_existente.rsplit("-", 1)[-1])
    except ValueError:
        logger.warning("Número fora do padrão ignorado ao iniciar sequência: %s", ultimo_existente)
        return 0


def _quantidade_no_periodo(db: Session, model, prefeitura_id: int, ano: int, mes: int) -> int:
    """Quantidade de registros da prefeitura criados no mês (created_at em [início, próximo início))"""
    return db.query(func.count(model.id)).filter(
        model.prefeitura_id == prefeitura_id,
        model.created_at >= _inicio_do_mes(ano, mes),
        model.created_at < _inicio_do_proximo_mes(ano, mes)
    ).scalar() or 0


def gerar_numero_sequencial(
    db: Session,
    model: Type[T],
    prefixo: str,
    prefeitura_id: int,
    agora: Optional[datetime] = None,
    digitos: int = 5,
    campo: str = "numero_processo",
    por_periodo: bool = False
) -> str:
    """
    Gera número sequencial no formato: PREFIXO-AAAA-MM-NNNNN

    O contador é por prefeitura, tabela, prefixo, ano e mês. Na primeira
    geração do escopo o contador é iniciado a partir dos dados existentes:
    - por número (padrão): maior sufixo já gravado em `campo` com o prefixo
    - por período (por_periodo=True): quantidade de registros criados no mês

    Deve ser chamado ANTES de qualquer outra escrita da transação: em caso de
    corrida na criação do contador a sessão sofre rollback.

    Args:
        db: Sessão do banco
        model: Modelo numerado (precisa de prefeitura_id, e de `campo` ou created_at)
        prefixo: Prefixo (ex: "CTR", "LIC")
        prefeitura_id: ID da prefeitura
        agora: Data/hora de referência (default: agora)
        digitos: Quantidade de dígitos do sufixo (default: 5)
        campo: Coluna que guarda o número no modelo
        por_periodo: Inicia o contador pela contagem de created_at no mês

    Returns:
        Número formatado (ex: "CTR-2025-03-00001")

    Raises:
        AllocationError se o banco falhar; o número nunca é adivinhado

    Usage:
        numero = gerar_numero_sequencial(db, ProcessoAdministrativo, "CTR", prefeitura_id)
        # Retorna: "CTR-2025-03-00001"

        protocolo = gerar_numero_sequencial(
            db, Licitacao, "LIC", prefeitura_id, campo="numero_protocolo", por_periodo=True
        )
    """
    agora = agora or datetime.now()
    ano, mes = agora.year, agora.month
    entidade = model.__tablename__
    base = f"{prefixo}-{ano}-{mes:02d}-"

    try:
        sequencia = _buscar_sequencia(db, prefeitura_id, entidade, prefixo, ano, mes)

        if sequencia is None:
            if por_periodo:
                ultimo_numero = _quantidade_no_periodo(db, model, prefeitura_id, ano, mes)
            else:
                ultimo_numero = _maior_sufixo_existente(db, model, campo, prefeitura_id, base)

            sequencia = Sequencia(
                prefeitura_id=prefeitura_id,
                entidade=entidade,
                prefixo=prefixo,
                ano=ano,
                mes=mes,
                ultimo_numero=ultimo_numero
            )
            db.add(sequencia)
            try:
                db.flush()
            except IntegrityError:
                # Outra requisição criou o contador do escopo primeiro
                db.rollback()
                sequencia = _buscar_sequencia(db, prefeitura_id, entidade, prefixo, ano, mes)
                if sequencia is None:
                    raise AllocationError("Contador de sequência indisponível")

        # Incrementar sequência
        sequencia.ultimo_numero += 1
        proximo = sequencia.ultimo_numero

        # Flush para garantir que o número seja reservado
        db.flush()

    except SQLAlchemyError as e:
        logger.error("Falha ao gerar número %s para prefeitura %s: %s", base, prefeitura_id, e)
        raise AllocationError(details=str(e)) from e

    return f"{base}{proximo:0{digitos}d}"

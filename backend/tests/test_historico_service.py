from datetime import date
from decimal import Decimal

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from sglc.database import engine
from sglc.models import AbaHistorico, EntidadeHistorico, ProcessoHistorico
from sglc.services import historico_service
from sglc.services.historico_service import (
    Ator, calcular_alteracoes, formatar_nome_campo, gerar_descricao_alteracao, normalizar_valor
)

ATOR = Ator(id=7, nome="Maria Servidora")


def test_nome_de_campo_legivel():
    assert formatar_nome_campo("valor_total") == "valor total"
    assert formatar_nome_campo("campo_sem_rotulo") == "campo sem rotulo"


def test_normalizacao_de_valores():
    assert normalizar_valor("valor_total", Decimal("1000")) == "1000.00"
    assert normalizar_valor("valor_total", 1500.5) == "1500.50"
    assert normalizar_valor("data_abertura", date(2025, 3, 15)) == "2025-03-15"
    assert normalizar_valor("data_abertura", "2025-03-15") == "2025-03-15"
    assert normalizar_valor("observacoes", "   ") is None


def test_modelos_de_descricao():
    assert gerar_descricao_alteracao("secretaria", None, "Saúde") == 'Definiu secretaria como "Saúde"'
    assert gerar_descricao_alteracao("secretaria", "Saúde", None) == 'Removeu secretaria (era "Saúde")'
    assert gerar_descricao_alteracao("status", "aberto", "vigente") == 'Alterou status de "aberto" para "vigente"'


def test_valores_equivalentes_nao_geram_alteracao():
    anterior = {"valor_total": Decimal("1000.00"), "data_abertura": date(2025, 3, 15)}
    novo = {"valor_total": Decimal("1000"), "data_abertura": "2025-03-15"}
    assert calcular_alteracoes(anterior, novo) == []


def test_apenas_campos_enviados_sao_comparados():
    anterior = {"valor_total": Decimal("10"), "secretaria": "Obras"}
    alteracoes = calcular_alteracoes(anterior, {"secretaria": "Saúde"})
    assert [a.campo for a in alteracoes] == ["secretaria"]


def test_alteracao_de_valor_total(db, prefeitura):
    resultado = historico_service.registrar_alteracoes(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL,
        {"valor_total": Decimal("1000.00")}, {"valor_total": Decimal("1500.50")}
    )

    assert resultado.sucesso
    assert resultado.registros == 1
    entrada = db.query(ProcessoHistorico).one()
    assert entrada.acao == "alterou"
    assert entrada.campo_alterado == "valor_total"
    assert entrada.valor_anterior == "1000.00"
    assert entrada.valor_novo == "1500.50"
    assert entrada.descricao == 'Alterou valor total de "R$ 1.000,00" para "R$ 1.500,50"'
    assert entrada.usuario_nome == "Maria Servidora"


def test_uma_entrada_por_campo_e_contexto(db, prefeitura):
    resultado = historico_service.registrar_alteracoes(
        db, 1, prefeitura.id, ATOR, AbaHistorico.NOTAS_FISCAIS,
        {"valor": Decimal("10"), "data_vencimento": None},
        {"valor": Decimal("12"), "data_vencimento": date(2025, 4, 1)},
        contexto="Nota fiscal nº 123"
    )

    assert resultado.registros == 2
    descricoes = sorted(e.descricao for e in db.query(ProcessoHistorico).all())
    assert descricoes == [
        'Nota fiscal nº 123: Alterou valor de "R$ 10,00" para "R$ 12,00"',
        'Nota fiscal nº 123: Definiu data de vencimento como "01/04/2025"',
    ]
    assert {e.aba for e in db.query(ProcessoHistorico)} == {"notas_fiscais"}


def test_sem_alteracao_nenhuma_entrada(db, prefeitura):
    resultado = historico_service.registrar_alteracoes(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL,
        {"status": "aberto"}, {"status": "aberto"}
    )
    assert resultado.sucesso
    assert resultado.registros == 0
    assert db.query(ProcessoHistorico).count() == 0


def test_listagem_mais_recente_primeiro_e_idempotente(db, prefeitura):
    historico_service.registrar_criacao(db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL, "Criou o processo")
    historico_service.registrar_exclusao(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL, "Arquivou o processo", resumo="aberto"
    )
    historico_service.registrar_criacao(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL, "Criou a licitação",
        entidade=EntidadeHistorico.LICITACAO
    )

    primeira = historico_service.listar_historico(db, 1, prefeitura.id)
    segunda = historico_service.listar_historico(db, 1, prefeitura.id)

    assert [e.descricao for e in primeira] == ["Arquivou o processo", "Criou o processo"]
    assert [e.id for e in primeira] == [e.id for e in segunda]
    assert primeira[0].valor_anterior == "aberto"


def test_listagem_isolada_por_prefeitura(db, prefeitura, outra_prefeitura):
    historico_service.registrar_criacao(db, 1, outra_prefeitura.id, ATOR, AbaHistorico.GERAL, "Outro")
    assert historico_service.listar_historico(db, 1, prefeitura.id) == []


def test_tabela_inexistente(db, prefeitura):
    ProcessoHistorico.__table__.drop(bind=engine)

    assert historico_service.listar_historico(db, 1, prefeitura.id) == []

    resultado = historico_service.registrar_criacao(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL, "Criou o processo"
    )
    assert not resultado.sucesso
    assert resultado.mensagem == "Histórico não disponível"


def test_falha_de_gravacao_nao_levanta(db, prefeitura, monkeypatch):
    def falhar(self):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", falhar)

    resultado = historico_service.registrar_criacao(
        db, 1, prefeitura.id, ATOR, AbaHistorico.GERAL, "Criou o processo"
    )
    monkeypatch.undo()

    assert not resultado.sucesso
    assert resultado.mensagem == "Erro ao registrar histórico"
    assert db.query(ProcessoHistorico).count() == 0

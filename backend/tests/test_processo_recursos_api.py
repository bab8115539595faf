from datetime import date
from decimal import Decimal

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import criar_usuario, headers_de
from sglc.models import ProcessoHistorico, ProcessoNotaFiscal

URL = "/api/v1/processos-administrativos/"


def criar_processo(client, headers):
    response = client.post(URL, json={"tipo": "contrato", "descricao": "Manutenção predial"}, headers=headers)
    return response.json()["data"]["id"]


def historico(client, headers, processo_id):
    return client.get(f"{URL}{processo_id}/historico", headers=headers).json()["data"]


def test_documentos(client, auth_headers, usuario):
    processo_id = criar_processo(client, auth_headers)

    response = client.post(
        f"{URL}{processo_id}/documentos",
        json={"nome_arquivo": "edital.pdf", "url_arquivo": "https://storage.exemplo/edital.pdf",
              "tipo_documento": "edital", "tipo_arquivo": "application/pdf"},
        headers=auth_headers
    )
    assert response.status_code == 201
    assert response.json()["data"]["usuario_nome"] == usuario.nome_completo

    documentos = client.get(f"{URL}{processo_id}/documentos", headers=auth_headers).json()["data"]
    assert [d["nome_arquivo"] for d in documentos] == ["edital.pdf"]
    assert historico(client, auth_headers, processo_id)[0]["descricao"] == "Anexou documento edital.pdf (edital)"


def test_movimentacao_financeira(client, auth_headers):
    processo_id = criar_processo(client, auth_headers)

    criada = client.post(
        f"{URL}{processo_id}/financeiro",
        json={"tipo": "empenho", "valor": "2500.00", "data": "2025-03-15"},
        headers=auth_headers
    )
    assert criada.status_code == 201
    mov_id = criada.json()["data"]["id"]

    entrada = historico(client, auth_headers, processo_id)[0]
    assert entrada["aba"] == "financeiro"
    assert entrada["descricao"] == "Adicionou movimentação financeira: empenho de R$ 2.500,00"

    atualizada = client.put(
        f"{URL}{processo_id}/financeiro/{mov_id}",
        json={"valor": "3000", "data": "2025-03-15"},
        headers=auth_headers
    )
    assert atualizada.status_code == 200
    alteracoes = [e for e in historico(client, auth_headers, processo_id) if e["acao"] == "alterou"]
    assert len(alteracoes) == 1
    assert alteracoes[0]["descricao"] == (
        'Movimentação financeira (empenho): Alterou valor de "R$ 2.500,00" para "R$ 3.000,00"'
    )

    removida = client.delete(f"{URL}{processo_id}/financeiro/{mov_id}", headers=auth_headers)
    assert removida.status_code == 200
    assert client.get(f"{URL}{processo_id}/financeiro", headers=auth_headers).json()["data"] == []
    assert historico(client, auth_headers, processo_id)[0]["acao"] == "deletou"


def test_notas_fiscais(client, db, auth_headers):
    processo_id = criar_processo(client, auth_headers)

    criada = client.post(
        f"{URL}{processo_id}/notas-fiscais",
        json={"numero_nota": "123", "data_emissao": "2025-03-10", "valor": "1500.50"},
        headers=auth_headers
    )
    assert criada.status_code == 201
    nota = criada.json()["data"]
    assert nota["status"] == "pendente"

    client.put(
        f"{URL}{processo_id}/notas-fiscais/{nota['id']}",
        json={"status": "paga"},
        headers=auth_headers
    )

    excluida = client.delete(f"{URL}{processo_id}/notas-fiscais/{nota['id']}", headers=auth_headers)
    assert excluida.status_code == 200
    assert db.query(ProcessoNotaFiscal).count() == 0

    entradas = [e for e in historico(client, auth_headers, processo_id) if e["aba"] == "notas_fiscais"]
    assert [e["descricao"] for e in entradas] == [
        "Deletou nota fiscal nº 123 no valor de R$ 1.500,50",
        'Nota fiscal nº 123: Alterou status de "pendente" para "paga"',
        "Cadastrou nota fiscal nº 123 no valor de R$ 1.500,50",
    ]


def test_falha_na_exclusao_da_nota_nao_gera_historico(client, db, auth_headers, monkeypatch):
    processo_id = criar_processo(client, auth_headers)
    nota = client.post(
        f"{URL}{processo_id}/notas-fiscais",
        json={"numero_nota": "77", "data_emissao": "2025-03-10", "valor": "10"},
        headers=auth_headers
    ).json()["data"]

    def falhar(self, instancia):
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "delete", falhar)
    response = client.delete(f"{URL}{processo_id}/notas-fiscais/{nota['id']}", headers=auth_headers)
    monkeypatch.undo()

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert db.query(ProcessoNotaFiscal).count() == 1
    assert db.query(ProcessoHistorico).filter(ProcessoHistorico.acao == "deletou").count() == 0


def test_nota_de_outro_processo(client, auth_headers):
    primeiro = criar_processo(client, auth_headers)
    segundo = criar_processo(client, auth_headers)
    nota = client.post(
        f"{URL}{primeiro}/notas-fiscais",
        json={"numero_nota": "1", "data_emissao": "2025-03-10", "valor": "10"},
        headers=auth_headers
    ).json()["data"]

    response = client.delete(f"{URL}{segundo}/notas-fiscais/{nota['id']}", headers=auth_headers)
    assert response.status_code == 404


def test_fiscais(client, auth_headers):
    processo_id = criar_processo(client, auth_headers)

    criado = client.post(
        f"{URL}{processo_id}/fiscais",
        json={"nome": "Ana Souza", "cargo": "Engenheira", "email": "ana@exemplo.gov.br"},
        headers=auth_headers
    )
    assert criado.status_code == 201
    fiscal = criado.json()["data"]
    assert fiscal["tipo_fiscal"] == "titular"
    assert fiscal["ativo"] is True

    atualizado = client.put(
        f"{URL}{processo_id}/fiscais/{fiscal['id']}",
        json={"tipo_fiscal": "suplente"},
        headers=auth_headers
    )
    assert atualizado.json()["data"]["tipo_fiscal"] == "suplente"
    assert historico(client, auth_headers, processo_id)[0]["descricao"] == (
        'Fiscal Ana Souza: Alterou tipo fiscal de "titular" para "suplente"'
    )

    sem_cargo = client.post(f"{URL}{processo_id}/fiscais", json={"nome": "Sem cargo"}, headers=auth_headers)
    assert sem_cargo.status_code == 400


def test_fiscalizacao_observacoes_e_pagamentos(client, auth_headers):
    processo_id = criar_processo(client, auth_headers)

    vistoria = client.post(
        f"{URL}{processo_id}/fiscalizacao",
        json={"tipo": "vistoria", "data_vistoria": "2025-03-20"},
        headers=auth_headers
    )
    assert vistoria.status_code == 201
    assert vistoria.json()["data"]["status"] == "Em andamento"

    observacao = client.post(f"{URL}{processo_id}/observacoes", json={"conteudo": "  Conferir medição  "}, headers=auth_headers)
    assert observacao.status_code == 201
    assert observacao.json()["message"] == "Observação adicionada com sucesso"
    assert observacao.json()["data"]["conteudo"] == "Conferir medição"

    vazia = client.post(f"{URL}{processo_id}/observacoes", json={"conteudo": "   "}, headers=auth_headers)
    assert vazia.status_code == 400

    pagamento = client.post(f"{URL}{processo_id}/pagamentos", json={"valor": "450.00"}, headers=auth_headers)
    assert pagamento.status_code == 201
    assert pagamento.json()["data"]["data_pagamento"] == date.today().isoformat()
    assert Decimal(pagamento.json()["data"]["valor"]) == Decimal("450")

    zerado = client.post(f"{URL}{processo_id}/pagamentos", json={"valor": "0"}, headers=auth_headers)
    assert zerado.status_code == 400

    assert len(client.get(f"{URL}{processo_id}/fiscalizacao", headers=auth_headers).json()["data"]) == 1
    assert len(client.get(f"{URL}{processo_id}/observacoes", headers=auth_headers).json()["data"]) == 1
    assert len(client.get(f"{URL}{processo_id}/pagamentos", headers=auth_headers).json()["data"]) == 1

    abas = {e["descricao"]: e["aba"] for e in historico(client, auth_headers, processo_id)}
    assert abas["Registrou pagamento (outros) de R$ 450,00"] == "financeiro"
    assert abas["Adicionou observação"] == "geral"


def test_sub_recursos_isolados_por_prefeitura(client, db, auth_headers, outra_prefeitura):
    processo_id = criar_processo(client, auth_headers)
    vizinho = headers_de(criar_usuario(db, "jose@vizinha.gov.br", outra_prefeitura))

    assert client.get(f"{URL}{processo_id}/notas-fiscais", headers=vizinho).status_code == 404
    response = client.post(
        f"{URL}{processo_id}/pagamentos", json={"valor": "10"}, headers=vizinho
    )
    assert response.status_code == 404


def test_processo_arquivado_nao_aceita_novos_registros(client, auth_headers):
    processo_id = criar_processo(client, auth_headers)
    client.delete(f"{URL}{processo_id}", headers=auth_headers)

    response = client.post(
        f"{URL}{processo_id}/financeiro",
        json={"tipo": "empenho", "valor": "10", "data": "2025-03-15"},
        headers=auth_headers
    )
    assert response.status_code == 400


def test_atualizacao_de_sub_recursos_nao_aceita_nulo(client, auth_headers):
    processo_id = criar_processo(client, auth_headers)
    mov = client.post(
        f"{URL}{processo_id}/financeiro",
        json={"tipo": "empenho", "valor": "100.00", "data": "2025-03-01"},
        headers=auth_headers
    ).json()["data"]
    nota = client.post(
        f"{URL}{processo_id}/notas-fiscais",
        json={"numero_nota": "77", "data_emissao": "2025-03-10", "valor": "100.00"},
        headers=auth_headers
    ).json()["data"]

    assert client.put(
        f"{URL}{processo_id}/financeiro/{mov['id']}", json={"valor": None}, headers=auth_headers
    ).status_code == 400
    assert client.put(
        f"{URL}{processo_id}/notas-fiscais/{nota['id']}", json={"numero_nota": None}, headers=auth_headers
    ).status_code == 400
    assert client.put(
        f"{URL}{processo_id}/notas-fiscais/{nota['id']}", json={"data_emissao": None}, headers=auth_headers
    ).status_code == 400

import re
from datetime import datetime
from decimal import Decimal

from conftest import criar_usuario, headers_de
from sglc.models import ProcessoAdministrativo, ProcessoHistorico

URL = "/api/v1/processos-administrativos/"


def criar_processo(client, headers, **dados):
    payload = {"tipo": "contrato", "descricao": "Coleta de resíduos", "valor_total": "1000.00"}
    payload.update(dados)
    response = client.post(URL, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_criar_processo_gera_numero(client, auth_headers):
    response = client.post(URL, json={"tipo": "contrato", "descricao": "Coleta"}, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    numero = body["data"]["numero_processo"]
    agora = datetime.now()
    assert numero == f"CTR-{agora.year}-{agora.month:02d}-00001"
    assert body["message"] == f"Processo criado com sucesso! Número: {numero}"
    assert body["data"]["status"] == "aberto"

    segundo = criar_processo(client, auth_headers)
    assert segundo["numero_processo"].endswith("-00002")

    licitacao = criar_processo(client, auth_headers, tipo="licitacao")
    assert re.match(r"^LIC-\d{4}-\d{2}-00001$", licitacao["numero_processo"])


def test_criar_processo_sem_tipo(client, auth_headers):
    response = client.post(URL, json={"descricao": "Sem tipo"}, headers=auth_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Dados inválidos: tipo"
    assert body["errors"][0]["campo"] == "tipo"


def test_criacao_registra_historico(client, auth_headers, usuario):
    processo = criar_processo(client, auth_headers)

    historico = client.get(f"{URL}{processo['id']}/historico", headers=auth_headers).json()["data"]

    assert len(historico) == 1
    assert historico[0]["acao"] == "criou"
    assert historico[0]["descricao"] == f"Criou o processo {processo['numero_processo']}"
    assert historico[0]["usuario_nome"] == usuario.nome_completo


def test_listagem_com_filtros_e_paginacao(client, auth_headers):
    criar_processo(client, auth_headers, descricao="Merenda escolar")
    criar_processo(client, auth_headers, descricao="Transporte escolar", tipo="licitacao")
    criar_processo(client, auth_headers, descricao="Iluminação pública")

    todos = client.get(URL, headers=auth_headers).json()
    assert todos["pagination"]["total"] == 3
    assert todos["data"][0]["descricao"] == "Iluminação pública"

    escolares = client.get(URL, params={"search": "escolar"}, headers=auth_headers).json()
    assert {p["descricao"] for p in escolares["data"]} == {"Merenda escolar", "Transporte escolar"}

    licitacoes = client.get(URL, params={"tipo": "licitacao"}, headers=auth_headers).json()
    assert [p["descricao"] for p in licitacoes["data"]] == ["Transporte escolar"]

    pagina = client.get(URL, params={"page": 2, "limit": 2}, headers=auth_headers).json()
    assert len(pagina["data"]) == 1
    assert pagina["pagination"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}


def test_isolamento_entre_prefeituras(client, db, auth_headers, outra_prefeitura):
    processo = criar_processo(client, auth_headers)
    vizinho = criar_usuario(db, "jose@vizinha.gov.br", outra_prefeitura)

    listagem = client.get(URL, headers=headers_de(vizinho)).json()
    assert listagem["data"] == []

    detalhe = client.get(f"{URL}{processo['id']}", headers=headers_de(vizinho))
    assert detalhe.status_code == 404
    assert detalhe.json()["message"] == "Processo não encontrado"


def test_atualizacao_registra_uma_entrada_por_campo(client, auth_headers):
    processo = criar_processo(client, auth_headers)

    response = client.put(
        f"{URL}{processo['id']}",
        json={"valor_total": "1500.50", "secretaria": "Obras", "descricao": processo["descricao"]},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["data"]["valor_total"]) == Decimal("1500.50")

    historico = client.get(f"{URL}{processo['id']}/historico", headers=auth_headers).json()["data"]
    alteracoes = {e["campo_alterado"]: e for e in historico if e["acao"] == "alterou"}

    assert set(alteracoes) == {"valor_total", "secretaria"}
    assert alteracoes["valor_total"]["valor_anterior"] == "1000.00"
    assert alteracoes["valor_total"]["valor_novo"] == "1500.50"
    assert alteracoes["valor_total"]["descricao"] == 'Alterou valor total de "R$ 1.000,00" para "R$ 1.500,50"'
    assert alteracoes["secretaria"]["descricao"] == 'Definiu secretaria como "Obras"'


def test_atualizacao_sem_mudanca_nao_gera_historico(client, auth_headers):
    processo = criar_processo(client, auth_headers)

    client.put(f"{URL}{processo['id']}", json={"valor_total": "1000"}, headers=auth_headers)

    historico = client.get(f"{URL}{processo['id']}/historico", headers=auth_headers).json()["data"]
    assert [e["acao"] for e in historico] == ["criou"]


def test_valor_negativo_rejeitado(client, auth_headers):
    processo = criar_processo(client, auth_headers)

    response = client.put(f"{URL}{processo['id']}", json={"valor_total": "-1"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["campo"] == "valor_total"


def test_exclusao_arquiva_o_processo(client, db, auth_headers):
    processo = criar_processo(client, auth_headers)

    response = client.delete(f"{URL}{processo['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "arquivado"

    registro = db.get(ProcessoAdministrativo, processo["id"])
    db.refresh(registro)
    assert registro.deleted_at is not None

    assert client.get(URL, headers=auth_headers).json()["data"] == []
    com_arquivados = client.get(URL, params={"incluir_arquivados": "true"}, headers=auth_headers).json()
    assert len(com_arquivados["data"]) == 1

    assert client.get(f"{URL}{processo['id']}", headers=auth_headers).status_code == 200

    bloqueado = client.put(f"{URL}{processo['id']}", json={"secretaria": "Saúde"}, headers=auth_headers)
    assert bloqueado.status_code == 400
    assert bloqueado.json()["message"] == "Alteração não permitida no status arquivado"

    historico = client.get(f"{URL}{processo['id']}/historico", headers=auth_headers).json()["data"]
    assert historico[0]["acao"] == "deletou"
    assert historico[0]["valor_anterior"] == "aberto"


def test_arquivar_via_update_rejeitado(client, auth_headers):
    processo = criar_processo(client, auth_headers)

    response = client.put(f"{URL}{processo['id']}", json={"status": "arquivado"}, headers=auth_headers)
    assert response.status_code == 400


def test_historico_sem_tabela_retorna_vazio(client, db, auth_headers):
    processo = criar_processo(client, auth_headers)
    ProcessoHistorico.__table__.drop(bind=db.get_bind())

    response = client.get(f"{URL}{processo['id']}/historico", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [], "pagination": None, "message": None}

    novo = client.post(URL, json={"tipo": "contrato"}, headers=auth_headers)
    assert novo.status_code == 201


def test_status_nulo_rejeitado(client, auth_headers):
    processo = criar_processo(client, auth_headers)

    response = client.put(f"{URL}{processo['id']}", json={"status": None}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["campo"] == "status"

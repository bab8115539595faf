import re
from datetime import date
from decimal import Decimal

from conftest import criar_usuario, headers_de
from sglc.models import Licitacao, TipoUsuario

URL = "/api/v1/licitacoes/"


def payload(**dados):
    base = {
        "modalidade": "pregao_eletronico",
        "objeto": "Aquisição de medicamentos",
        "secretaria": "Saúde",
        "data_abertura": "2025-03-10",
        "responsavel": "Carlos Pregoeiro",
        "valor_estimado": "250000.00",
    }
    base.update(dados)
    return base


def test_criar_licitacao(client, auth_headers):
    response = client.post(URL, json=payload(), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert re.match(r"^LIC-\d{4}-\d{2}-00001$", data["numero_protocolo"])
    assert data["status"] == "em_aberto"
    assert data["modalidade"] == "pregao_eletronico"

    segunda = client.post(URL, json=payload(), headers=auth_headers).json()["data"]
    assert segunda["numero_protocolo"].endswith("-00002")


def test_campos_obrigatorios(client, auth_headers):
    response = client.post(URL, json={"objeto": "Sem modalidade"}, headers=auth_headers)

    assert response.status_code == 400
    campos = {e["campo"] for e in response.json()["errors"]}
    assert {"modalidade", "secretaria", "data_abertura", "responsavel"} <= campos


def test_modalidade_invalida(client, auth_headers):
    response = client.post(URL, json=payload(modalidade="leilao_reverso"), headers=auth_headers)
    assert response.status_code == 400


def test_filtros(client, auth_headers):
    client.post(URL, json=payload(), headers=auth_headers)
    client.post(URL, json=payload(modalidade="dispensa", secretaria="Educação", valor_estimado="8000",
                                  data_abertura="2025-05-02"), headers=auth_headers)

    def listar(**params):
        return [l["secretaria"] for l in client.get(URL, params=params, headers=auth_headers).json()["data"]]

    assert listar(modalidade="dispensa") == ["Educação"]
    assert listar(secretaria="saúde") == ["Saúde"]
    assert listar(valor_max="10000") == ["Educação"]
    assert listar(valor_min="10000") == ["Saúde"]
    assert listar(data_inicio="2025-04-01") == ["Educação"]
    assert listar(data_fim="2025-03-31") == ["Saúde"]
    assert listar(search="medicamentos") == ["Educação", "Saúde"]


def test_master_ve_todas_as_prefeituras(client, db, prefeitura, outra_prefeitura, auth_headers):
    for p in (prefeitura, outra_prefeitura):
        db.add(Licitacao(
            prefeitura_id=p.id, numero_protocolo="LIC-2025-03-00001", modalidade="dispensa",
            objeto="Serviço", secretaria="Obras", responsavel="Pedro", data_abertura=date(2025, 3, 1)
        ))
    db.commit()
    master = criar_usuario(db, "master@sglc.com.br", tipo=TipoUsuario.MASTER)

    proprias = client.get(URL, headers=auth_headers).json()
    todas = client.get(URL, headers=headers_de(master)).json()

    assert proprias["pagination"]["total"] == 1
    assert todas["pagination"]["total"] == 2


def test_atualizar_licitacao_registra_historico(client, auth_headers):
    licitacao = client.post(URL, json=payload(), headers=auth_headers).json()["data"]

    response = client.put(
        f"{URL}{licitacao['id']}",
        json={"status": "homologada", "valor_estimado": "240000"},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "homologada"
    assert Decimal(response.json()["data"]["valor_estimado"]) == Decimal("240000")

    historico = client.get(f"{URL}{licitacao['id']}/historico", headers=auth_headers).json()["data"]
    assert {e["entidade"] for e in historico} == {"licitacao"}
    descricoes = {e["descricao"] for e in historico if e["acao"] == "alterou"}
    assert descricoes == {
        'Alterou status de "em_aberto" para "homologada"',
        'Alterou valor estimado de "R$ 250.000,00" para "R$ 240.000,00"',
    }


def test_licitacao_de_outra_prefeitura(client, db, auth_headers, outra_prefeitura):
    licitacao = client.post(URL, json=payload(), headers=auth_headers).json()["data"]
    vizinho = headers_de(criar_usuario(db, "jose@vizinha.gov.br", outra_prefeitura))

    assert client.get(f"{URL}{licitacao['id']}", headers=vizinho).status_code == 404
    assert client.put(f"{URL}{licitacao['id']}", json={"status": "cancelada"}, headers=vizinho).status_code == 404


def test_atualizacao_nao_aceita_nulo_em_campo_obrigatorio(client, auth_headers):
    licitacao = client.post(URL, json=payload(), headers=auth_headers).json()["data"]

    for campo in ("status", "modalidade", "secretaria", "responsavel", "data_abertura"):
        response = client.put(f"{URL}{licitacao['id']}", json={campo: None}, headers=auth_headers)
        assert response.status_code == 400, campo
        assert response.json()["errors"][0]["campo"] == campo

    vazio = client.put(f"{URL}{licitacao['id']}", json={"secretaria": "   "}, headers=auth_headers)
    assert vazio.status_code == 400

from conftest import SENHA_PADRAO, criar_usuario, headers_de
from sglc.models import TipoUsuario

API = "/api/v1"


def test_health_e_raiz_sao_publicos(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert "SGLC" in client.get("/").json()["message"]


def test_login(client, usuario):
    response = client.post(f"{API}/auth/login", json={"email": "MARIA@exemplo.sp.gov.br", "senha": SENHA_PADRAO})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "maria@exemplo.sp.gov.br"
    assert body["prefeitura"]["id"] == usuario.prefeitura_id

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == usuario.id


def test_login_senha_errada(client, usuario):
    response = client.post(f"{API}/auth/login", json={"email": usuario.email, "senha": "errada"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Email ou senha incorretos"}


def test_rota_protegida_sem_token(client, db):
    response = client.get(f"{API}/processos-administrativos/")

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["message"] == "Token de autenticação não fornecido"


def test_token_invalido(client, db):
    response = client.get(f"{API}/contratos/", headers={"Authorization": "Bearer nao-e-um-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token inválido ou expirado"


def test_usuario_inativo(client, db, usuario):
    usuario.ativo = False
    db.commit()

    response = client.get(f"{API}/auth/me", headers=headers_de(usuario))
    assert response.status_code == 401


def test_sem_prefeitura_disponivel(client, db):
    usuario = criar_usuario(db, "orfao@exemplo.gov.br")

    response = client.get(f"{API}/processos-administrativos/", headers=headers_de(usuario))

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "SEM_PREFEITURA"
    assert "hint" in body


def test_setup_inicial(client, db):
    status = client.get(f"{API}/setup/status")
    assert status.json()["initialized"] is False

    payload = {"email": "admin@sglc.com.br", "senha": "senha-master-1", "nome_completo": "Administrador"}
    response = client.post(f"{API}/setup/init", json=payload)
    assert response.status_code == 201
    assert response.json()["email"] == "admin@sglc.com.br"

    assert client.get(f"{API}/setup/status").json()["initialized"] is True

    repetido = client.post(f"{API}/setup/init", json=payload)
    assert repetido.status_code == 400
    assert repetido.json()["success"] is False


def test_setup_senha_curta(client, db):
    response = client.post(
        f"{API}/setup/init",
        json={"email": "admin@sglc.com.br", "senha": "curta", "nome_completo": "Administrador"}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["campo"] == "senha"


def test_cadastro_de_prefeitura_apenas_master(client, master, auth_headers):
    payload = {"nome": "Prefeitura Nova", "cnpj": "12.345.678/0001-95", "estado": "mg"}

    negado = client.post(f"{API}/prefeituras/", json=payload, headers=auth_headers)
    assert negado.status_code == 403

    criado = client.post(f"{API}/prefeituras/", json=payload, headers=headers_de(master))
    assert criado.status_code == 201
    assert criado.json()["data"]["cnpj"] == "12345678000195"
    assert criado.json()["data"]["estado"] == "MG"

    duplicado = client.post(f"{API}/prefeituras/", json=payload, headers=headers_de(master))
    assert duplicado.status_code == 400
    assert duplicado.json()["message"] == "CNPJ já cadastrado"


def test_listagem_de_prefeituras(client, db, prefeitura, outra_prefeitura, auth_headers):
    master = criar_usuario(db, "master@sglc.com.br", tipo=TipoUsuario.MASTER)

    proprias = client.get(f"{API}/prefeituras/", headers=auth_headers).json()["data"]
    todas = client.get(f"{API}/prefeituras/", headers=headers_de(master)).json()["data"]

    assert [p["id"] for p in proprias] == [prefeitura.id]
    assert {p["id"] for p in todas} == {prefeitura.id, outra_prefeitura.id}

"""
Fixtures compartilhadas dos testes

Os testes rodam contra SQLite em memória; as variáveis de ambiente são
definidas antes do primeiro import de sglc.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "chave-de-testes-com-pelo-menos-32-caracteres"
os.environ["CRIAR_PREFEITURA_PADRAO"] = "false"

import pytest
from fastapi.testclient import TestClient

from sglc.core.security import create_access_token, hash_password
from sglc.database import Base, SessionLocal, engine, get_db
from sglc.main import app
from sglc.models import Prefeitura, Usuario, TipoUsuario

SENHA_PADRAO = "senha-segura-123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def criar_prefeitura(db, nome="Prefeitura de Exemplo", cnpj="11222333000181", ativo=True):
    prefeitura = Prefeitura(nome=nome, cnpj=cnpj, cidade="Exemplo", estado="SP", ativo=ativo)
    db.add(prefeitura)
    db.commit()
    db.refresh(prefeitura)
    return prefeitura


def criar_usuario(db, email, prefeitura=None, tipo=TipoUsuario.ADMIN_PREFEITURA, nome="Maria Servidora"):
    usuario = Usuario(
        prefeitura_id=prefeitura.id if prefeitura else None,
        nome_completo=nome,
        email=email,
        senha_hash=hash_password(SENHA_PADRAO),
        tipo=tipo,
        ativo=True,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def headers_de(usuario):
    token = create_access_token({
        "user_id": usuario.id,
        "prefeitura_id": usuario.prefeitura_id,
        "tipo": usuario.tipo.value,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def prefeitura(db):
    return criar_prefeitura(db)


@pytest.fixture
def outra_prefeitura(db):
    return criar_prefeitura(db, nome="Prefeitura Vizinha", cnpj="44555666000172")


@pytest.fixture
def usuario(db, prefeitura):
    return criar_usuario(db, "maria@exemplo.sp.gov.br", prefeitura)


@pytest.fixture
def master(db):
    return criar_usuario(db, "master@sglc.com.br", tipo=TipoUsuario.MASTER, nome="Administrador Geral")


@pytest.fixture
def auth_headers(usuario):
    return headers_de(usuario)

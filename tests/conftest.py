# INVOICER/backend/tests/conftest.py : configuration pour les tests

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from invoicer.main import app
from invoicer.database import get_db, create_tables, drop_tables

ADMIN = {
    "username": "admin",
    "email": "admin@tokomaju.co.id",
    "password": "Admin123!",
    "role": "admin"
}

@pytest.fixture
def db_engine():
    """Base SQLite en mémoire, neuve pour chaque test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

@pytest.fixture
def db_session(session_factory):
    """Session directe pour tester les services sans passer par HTTP"""
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def client(session_factory):
    """Client de test branché sur la base de test"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

def _login(client, username, password):
    """Retourne les headers d'authentification (le cookie de session est retiré)"""
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}

@pytest.fixture
def login(client):
    """Connexion par nom d'utilisateur et mot de passe, retourne les headers"""
    return lambda username, password: _login(client, username, password)

@pytest.fixture
def admin_credentials():
    return dict(ADMIN)

@pytest.fixture
def admin_headers(client):
    """Premier administrateur créé via l'assistant d'installation"""
    response = client.post("/auth/register", json=ADMIN)
    assert response.status_code == 201, response.text
    return _login(client, ADMIN["username"], ADMIN["password"])

@pytest.fixture
def user_headers(client, admin_headers):
    """Utilisateur simple créé par l'administrateur"""
    response = client.post("/users", json={
        "username": "kasir",
        "email": "kasir@tokomaju.co.id",
        "password": "Kasir123!",
        "role": "user"
    }, headers=admin_headers)
    assert response.status_code == 201, response.text
    return _login(client, "kasir", "Kasir123!")

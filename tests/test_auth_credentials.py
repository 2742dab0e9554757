"""Login, roles and tenant credentials."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from apps.backend.main import app
from apps.backend.auth import create_user_token, decode_token, get_password_hash
from apps.backend.database import Base, get_test_engine
from apps.backend.deps import get_db
from apps.backend.models.credential import Credential
from apps.backend.models.tenant import Tenant, User
from apps.backend.services.token_crypto import decrypt_token
from scripts.seed import seed

client = TestClient(app)


@pytest.fixture
def test_db_session():
    engine = get_test_engine()
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    db.add(Tenant(id="t1", name="Acme"))
    db.add(User(id="u1", email="admin@acme.test", password_hash=get_password_hash("pw"), role="ADMIN", tenant_id="t1"))
    db.add(User(id="u2", email="viewer@acme.test", password_hash=get_password_hash("pw"), role="VIEWER", tenant_id="t1"))
    db.commit()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield db
    finally:
        app.dependency_overrides.pop(get_db, None)
        db.close()


def _auth(role="ADMIN", tenant_id="t1"):
    return {"Authorization": f"Bearer {create_user_token('u1', tenant_id, role)}"}


NEW_CREDENTIAL = {
    "label": "main",
    "apiKey": "key-1",
    "apiToken": "supersecret",
    "subdomain": "acme",
    "sid": "acme1",
}


@pytest.mark.timeout(10)
def test_login_returns_token_with_tenant_claims(test_db_session):
    r = client.post("/api/v1/auth/login", json={"email": "admin@acme.test", "password": "pw"})
    assert r.status_code == 200
    claims = decode_token(r.json()["token"])
    assert claims["sub"] == "u1"
    assert claims["tenant_id"] == "t1"
    assert claims["role"] == "ADMIN"


@pytest.mark.timeout(10)
def test_login_wrong_password(test_db_session):
    r = client.post("/api/v1/auth/login", json={"email": "admin@acme.test", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"


@pytest.mark.timeout(10)
def test_refresh_and_me(test_db_session):
    token = create_user_token("u2", "t1", "VIEWER")
    r = client.post("/api/v1/auth/refresh", json={"token": token})
    assert r.status_code == 200
    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {r.json()['token']}"})
    assert me.json() == {"userId": "u2", "tenantId": "t1", "role": "VIEWER"}

    assert client.post("/api/v1/auth/refresh", json={"token": "garbage"}).status_code == 401


@pytest.mark.timeout(10)
def test_unknown_role_is_unauthorized(test_db_session):
    r = client.get("/api/v1/auth/me", headers=_auth(role="ROOT"))
    assert r.status_code == 401


@pytest.mark.timeout(10)
def test_admin_creates_credential_with_encrypted_token(test_db_session):
    r = client.post("/api/v1/credentials", json=NEW_CREDENTIAL, headers=_auth())
    assert r.status_code == 201
    data = r.json()
    assert data["apiToken"] == "****cret"
    assert data["tenantId"] == "t1"

    row = test_db_session.get(Credential, data["id"])
    assert row.api_token_encrypted != "supersecret"
    assert decrypt_token(row.api_token_encrypted) == "supersecret"


@pytest.mark.timeout(10)
def test_non_admin_cannot_create_credential(test_db_session):
    r = client.post("/api/v1/credentials", json=NEW_CREDENTIAL, headers=_auth(role="EDITOR"))
    assert r.status_code == 403
    assert test_db_session.query(Credential).count() == 0


@pytest.mark.timeout(10)
def test_credentials_list_is_tenant_scoped(test_db_session):
    client.post("/api/v1/credentials", json=NEW_CREDENTIAL, headers=_auth())
    assert len(client.get("/api/v1/credentials", headers=_auth(role="VIEWER")).json()) == 1
    assert client.get("/api/v1/credentials", headers=_auth(tenant_id="t2")).json() == []


@pytest.mark.timeout(10)
def test_missing_credential_fields_are_400(test_db_session):
    r = client.post("/api/v1/credentials", json={"label": "x"}, headers=_auth())
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_seed_is_idempotent():
    engine = get_test_engine()
    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine)()
    try:
        seed(db)
        seed(db)
        assert db.query(Tenant).count() == 1
        admin = db.query(User).one()
        assert admin.role == "ADMIN"
    finally:
        db.close()

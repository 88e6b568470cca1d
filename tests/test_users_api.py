from sqlmodel import Session, select

from fieldvault.main import app
from fieldvault.models.schema import AuditLog, User
from fieldvault.shared.db import get_session

NEW_USER = {
    "name": "Ana Souza",
    "email": "ana@example.com",
    "cpf": "123.456.789-00",
    "address": "Rua Teste 123",
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_user_encrypts_sensitive_fields(client, engine, crypto):
    response = client.post("/users", json=NEW_USER)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == NEW_USER["email"]
    assert "cpf" not in body
    assert "address" not in body

    with Session(engine) as session:
        user = session.get(User, body["id"])
        assert user.cpf != NEW_USER["cpf"]
        assert crypto.is_encrypted(user.cpf)
        assert crypto.decrypt(user.cpf) == NEW_USER["cpf"]
        assert crypto.decrypt(user.address) == NEW_USER["address"]


def test_create_user_without_sensitive_fields(client, engine):
    response = client.post("/users", json={"name": "Bia", "email": "bia@example.com"})

    assert response.status_code == 200
    with Session(engine) as session:
        user = session.get(User, response.json()["id"])
        assert user.cpf is None
        assert user.address is None


def test_duplicate_email_rejected(client):
    assert client.post("/users", json=NEW_USER).status_code == 200

    response = client.post("/users", json=NEW_USER)
    assert response.status_code == 409


def test_export_decrypts_personal_data(client):
    user_id = client.post("/users", json=NEW_USER).json()["id"]

    response = client.get(
        f"/users/{user_id}/export", headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["version"] == "1.0"
    assert data["personal_data"]["cpf"] == NEW_USER["cpf"]
    assert data["personal_data"]["address"] == NEW_USER["address"]
    assert data["activity_logs"] == []


def test_export_is_audited(client, engine):
    user_id = client.post("/users", json=NEW_USER).json()["id"]

    client.get(f"/users/{user_id}/export", headers={"x-forwarded-for": "203.0.113.7"})
    second = client.get(f"/users/{user_id}/export").json()

    assert [log["action"] for log in second["activity_logs"]] == ["DATA_EXPORT"]
    assert second["activity_logs"][0]["ip"] == "203.0.113.7"

    with Session(engine) as session:
        logs = session.exec(select(AuditLog).where(AuditLog.user_id == user_id)).all()
        assert len(logs) == 2


def test_export_reads_legacy_plaintext(client, engine):
    with Session(engine) as session:
        user = User(name="Legado", email="legacy@example.com", cpf="12345678900")
        session.add(user)
        session.commit()
        user_id = user.id

    response = client.get(f"/users/{user_id}/export")

    assert response.status_code == 200
    assert response.json()["personal_data"]["cpf"] == "12345678900"


def test_export_unknown_user(client):
    response = client.get("/users/9999/export")
    assert response.status_code == 404


def test_migrate_endpoint(client, engine, crypto):
    with Session(engine) as session:
        session.add(User(name="Ana", email="ana@example.com", cpf="12345678900"))
        session.add(
            User(name="Bruno", email="bruno@example.com", cpf=crypto.encrypt("1"))
        )
        session.commit()

    response = client.post("/maintenance/migrate")

    assert response.status_code == 200
    assert response.json() == {
        "message": "Migration complete",
        "users_processed": 2,
        "users_updated": 1,
    }

    again = client.post("/maintenance/migrate").json()
    assert again["users_updated"] == 0


class _NoRows:
    def first(self):
        return None


class StaleReadSession(Session):
    """Session whose lookups miss rows another request has just inserted."""

    def exec(self, *args, **kwargs):
        return _NoRows()


def test_duplicate_email_rejected_on_insert(client, engine):
    assert client.post("/users", json=NEW_USER).status_code == 200

    def stale_session():
        with StaleReadSession(engine) as session:
            yield session

    app.dependency_overrides[get_session] = stale_session

    response = client.post("/users", json=NEW_USER)

    assert response.status_code == 409
    with Session(engine) as session:
        users = session.exec(select(User).where(User.email == NEW_USER["email"])).all()
        assert len(users) == 1

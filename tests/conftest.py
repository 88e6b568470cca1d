import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from fieldvault.core import CryptoService
from fieldvault.dependencies import get_crypto_service
from fieldvault.main import app
from fieldvault.shared.db import get_session


@pytest.fixture
def key_bytes():
    return bytes(range(32))


@pytest.fixture
def crypto(key_bytes):
    return CryptoService(key_bytes)


@pytest.fixture
def other_crypto():
    return CryptoService(b"k" * 32)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, crypto):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_crypto_service] = lambda: crypto
    # No context manager: the lifespan would read the real key and database
    yield TestClient(app)
    app.dependency_overrides.clear()

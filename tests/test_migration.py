from sqlmodel import select

from fieldvault.core.migration import encrypt_plaintext_fields
from fieldvault.models.schema import User


def add_users(session, crypto):
    users = [
        User(name="Ana", email="ana@example.com", cpf="12345678900"),
        User(name="Bruno", email="bruno@example.com", cpf=crypto.encrypt("98765432100")),
        User(name="Carla", email="carla@example.com", address="Rua Teste 123"),
        User(name="Davi", email="davi@example.com"),
    ]
    session.add_all(users)
    session.commit()


def by_email(session, email):
    return session.exec(select(User).where(User.email == email)).one()


def test_encrypts_only_plaintext_fields(session, crypto):
    add_users(session, crypto)
    already_sealed = by_email(session, "bruno@example.com").cpf

    report = encrypt_plaintext_fields(session, crypto)

    assert report.processed == 4
    assert report.updated == 2

    ana = by_email(session, "ana@example.com")
    assert crypto.is_encrypted(ana.cpf)
    assert crypto.decrypt(ana.cpf) == "12345678900"

    carla = by_email(session, "carla@example.com")
    assert crypto.decrypt(carla.address) == "Rua Teste 123"
    assert carla.cpf is None

    assert by_email(session, "bruno@example.com").cpf == already_sealed


def test_second_run_is_a_no_op(session, crypto):
    add_users(session, crypto)
    encrypt_plaintext_fields(session, crypto)
    snapshot = {u.email: (u.cpf, u.address) for u in session.exec(select(User))}

    report = encrypt_plaintext_fields(session, crypto)

    assert report.updated == 0
    assert {u.email: (u.cpf, u.address) for u in session.exec(select(User))} == snapshot


def test_colon_in_plaintext_is_still_encrypted(session, crypto):
    session.add(User(name="Eva", email="eva@example.com", address="Bloco A: 12"))
    session.commit()

    encrypt_plaintext_fields(session, crypto)

    eva = by_email(session, "eva@example.com")
    assert eva.address != "Bloco A: 12"
    assert crypto.decrypt(eva.address) == "Bloco A: 12"

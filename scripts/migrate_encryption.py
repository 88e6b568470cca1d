# Encrypt cpf/address columns still stored as plaintext
from sqlalchemy import Engine
from sqlmodel import Session

from fieldvault.core import CryptoService
from fieldvault.core.migration import MigrationReport, encrypt_plaintext_fields
from fieldvault.shared import load_config

config = load_config()


def migrate(engine: Engine, crypto: CryptoService) -> MigrationReport:
    with Session(engine) as session:
        return encrypt_plaintext_fields(session, crypto)


if __name__ == "__main__":
    import argparse

    from fieldvault.shared.db import build_engine, engine, init_db

    def parse_args():
        parser = argparse.ArgumentParser(
            description="Encrypt plaintext sensitive fields in the users table"
        )
        parser.add_argument(
            "--db",
            type=str,
            help="Database URI override (default: database.path from config.toml)",
        )
        return parser.parse_args()

    args = parse_args()
    if args.db:
        engine = build_engine(args.db)

    init_db(engine)
    report = migrate(engine, CryptoService.from_config(config))
    print(
        f"[✔] Migration complete. {report.updated} of {report.processed} users updated."
    )

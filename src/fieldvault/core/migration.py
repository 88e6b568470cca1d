from dataclasses import dataclass

from sqlmodel import Session, select

from fieldvault.core.crypto import CryptoService
from fieldvault.core.fields import SENSITIVE_FIELDS
from fieldvault.models.schema import User
from fieldvault.shared import Logger

logger = Logger(__name__).get_logger()


@dataclass
class MigrationReport:
    processed: int = 0
    updated: int = 0


def encrypt_plaintext_fields(
    session: Session,
    crypto: CryptoService,
    fields: tuple[str, ...] = SENSITIVE_FIELDS,
) -> MigrationReport:
    """
    Encrypt sensitive user columns still stored as plaintext.

    Values that already look encrypted are left alone, so running the
    migration again is a no-op.
    """
    logger.info("Starting encryption migration for fields: %s", ", ".join(fields))
    report = MigrationReport()

    for user in session.exec(select(User)).all():
        report.processed += 1
        modified = False

        for field in fields:
            value = getattr(user, field)
            if value and not crypto.is_encrypted(value):
                setattr(user, field, crypto.encrypt(value))
                modified = True

        if modified:
            session.add(user)
            report.updated += 1
            logger.debug("Encrypted plaintext fields for user %s", user.id)

    session.commit()

    logger.info(
        "Migration complete: %s users processed, %s updated",
        report.processed,
        report.updated,
    )
    return report

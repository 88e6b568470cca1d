from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session

from fieldvault.core import CryptoService
from fieldvault.core.migration import encrypt_plaintext_fields
from fieldvault.dependencies import get_crypto_service
from fieldvault.models.requests import MigrationResponse
from fieldvault.shared import Logger
from fieldvault.shared.db import get_session
from fieldvault.shared.http import server_error_handler

logger = Logger(__name__).get_logger()

router = APIRouter()


@router.post("/maintenance/migrate", response_model=MigrationResponse)
def migrate(
    session: Annotated[Session, Depends(get_session)],
    crypto: Annotated[CryptoService, Depends(get_crypto_service)],
):
    """Encrypt sensitive user fields that are still stored as plaintext."""
    with server_error_handler():
        report = encrypt_plaintext_fields(session, crypto)

    return MigrationResponse(
        message="Migration complete",
        users_processed=report.processed,
        users_updated=report.updated,
    )

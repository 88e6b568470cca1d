from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from fieldvault.core import CryptoService
from fieldvault.core.fields import reveal, seal
from fieldvault.dependencies import get_crypto_service
from fieldvault.models.requests import (
    ActivityLog,
    CreateUserRequest,
    ExportMetadata,
    ExportResponse,
    PersonalData,
    UserResponse,
)
from fieldvault.models.schema import AuditLog, User
from fieldvault.shared import Logger
from fieldvault.shared.db import get_session
from fieldvault.shared.http import server_error_handler

logger = Logger(__name__).get_logger()

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]
CryptoDep = Annotated[CryptoService, Depends(get_crypto_service)]


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/users", response_model=UserResponse)
def create_user(data: CreateUserRequest, session: SessionDep, crypto: CryptoDep):
    """
    Register a user. ``cpf`` and ``address`` are encrypted before they are
    written; the response never echoes them.
    """
    logger.debug("Creating user with email: %s", data.email)

    with server_error_handler():
        existing_user = session.exec(
            select(User).where(User.email == data.email)
        ).first()
        if existing_user:
            raise HTTPException(status_code=409, detail="Email already registered")

        new_user = User(
            name=data.name,
            email=data.email,
            cpf=seal(crypto, data.cpf),
            address=seal(crypto, data.address),
        )
        session.add(new_user)
        try:
            session.commit()
        except IntegrityError as e:
            # Another request registered the same email after the check above
            session.rollback()
            logger.warning("Duplicate email rejected on insert: %s", data.email)
            raise HTTPException(
                status_code=409, detail="Email already registered"
            ) from e
        session.refresh(new_user)

    logger.info("User %s created", new_user.id)
    return UserResponse(id=new_user.id, name=new_user.name, email=new_user.email)


@router.get("/users/{user_id}/export", response_model=ExportResponse)
def export_user(
    user_id: int, request: Request, session: SessionDep, crypto: CryptoDep
):
    """Export everything stored about a user with sensitive fields decrypted."""
    logger.debug("Export requested for user %s", user_id)

    with server_error_handler():
        user = session.get(User, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")

        personal_data = PersonalData(
            id=user.id,
            name=user.name,
            email=user.email,
            cpf=reveal(crypto, user.cpf),
            address=reveal(crypto, user.address),
            created_at=user.created_at,
        )

        logs = session.exec(
            select(AuditLog)
            .where(AuditLog.user_id == user_id)
            .order_by(AuditLog.created_at)
        ).all()
        activity_logs = [
            ActivityLog(action=log.action, ip=log.ip, created_at=log.created_at)
            for log in logs
        ]

        session.add(
            AuditLog(user_id=user_id, action="DATA_EXPORT", ip=client_ip(request))
        )
        session.commit()

    logger.info("Exported data for user %s", user_id)
    return ExportResponse(
        metadata=ExportMetadata(exported_at=datetime.now(UTC)),
        personal_data=personal_data,
        activity_logs=activity_logs,
    )

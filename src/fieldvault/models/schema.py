from datetime import UTC, datetime

from sqlmodel import Field, Relationship, SQLModel


def _now() -> datetime:
    return datetime.now(UTC)


class User(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(..., description="Display name")
    email: str = Field(..., unique=True, index=True, description="Unique email")
    cpf: str | None = Field(
        default=None, description="Taxpayer id, stored as ivHex:cipherHex"
    )
    address: str | None = Field(
        default=None, description="Postal address, stored as ivHex:cipherHex"
    )
    created_at: datetime = Field(
        default_factory=_now, description="Timestamp when the user was created"
    )

    # Relationships
    audit_logs: list["AuditLog"] = Relationship(back_populates="user")


class AuditLog(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(..., foreign_key="user.id", index=True)
    action: str = Field(..., description="Audited action, e.g. DATA_EXPORT")
    ip: str | None = Field(default=None, description="Caller address")
    created_at: datetime = Field(default_factory=_now)

    user: User | None = Relationship(back_populates="audit_logs")

from .maintenance import MigrationResponse
from .users import (
    ActivityLog,
    CreateUserRequest,
    ExportMetadata,
    ExportResponse,
    PersonalData,
    UserResponse,
)

__all__ = [
    "ActivityLog",
    "CreateUserRequest",
    "ExportMetadata",
    "ExportResponse",
    "MigrationResponse",
    "PersonalData",
    "UserResponse",
]

from datetime import datetime

from pydantic import BaseModel


class CreateUserRequest(BaseModel):
    name: str
    email: str
    cpf: str | None = None
    address: str | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


class ExportMetadata(BaseModel):
    exported_at: datetime
    version: str = "1.0"


class PersonalData(BaseModel):
    id: int
    name: str
    email: str
    cpf: str | None
    address: str | None
    created_at: datetime


class ActivityLog(BaseModel):
    action: str
    ip: str | None
    created_at: datetime


class ExportResponse(BaseModel):
    metadata: ExportMetadata
    personal_data: PersonalData
    activity_logs: list[ActivityLog]

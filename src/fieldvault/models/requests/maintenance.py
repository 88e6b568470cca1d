from pydantic import BaseModel


class MigrationResponse(BaseModel):
    message: str
    users_processed: int
    users_updated: int

from typing import Protocol, runtime_checkable
from pydantic import BaseModel

class DbCredentials(BaseModel):
    host: str
    port: int = 5432
    database: str
    username: str
    password: str

@runtime_checkable
class SecretProviderPort(Protocol):
    async def get_database_credentials(self) -> DbCredentials | None: ...
    def clear(self) -> None: ...

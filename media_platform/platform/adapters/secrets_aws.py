import json
import logging
from functools import partial
import anyio
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError
from media_platform.core.config import Settings
from media_platform.core.errors import SecretRetrievalError
from media_platform.platform.ports.secrets import DbCredentials, SecretProviderPort
from media_platform.platform.adapters.aws import make_client

log = logging.getLogger("secrets")

class SecretsManagerProvider(SecretProviderPort):
    """Fetches the database credential bundle once; later calls return the cached copy."""

    def __init__(self, settings: Settings, client=None):
        self.client = client or make_client("secretsmanager", settings)
        self.secret_name = settings.db_secret_name
        self._cached: DbCredentials | None = None
        self._lock = anyio.Lock()

    async def get_database_credentials(self) -> DbCredentials:
        if self._cached is not None:
            return self._cached
        async with self._lock:
            if self._cached is None:
                self._cached = await self._fetch()
        return self._cached

    async def _fetch(self) -> DbCredentials:
        log.info("Fetching database credentials from Secrets Manager: %s", self.secret_name)
        try:
            resp = await anyio.to_thread.run_sync(
                partial(self.client.get_secret_value, SecretId=self.secret_name)
            )
        except (ClientError, BotoCoreError) as e:
            raise SecretRetrievalError(f"Could not retrieve secret {self.secret_name}: {e}") from e
        raw = resp.get("SecretString")
        if not raw:
            raise SecretRetrievalError(f"Secret {self.secret_name} has no SecretString")
        try:
            creds = DbCredentials.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise SecretRetrievalError(f"Secret {self.secret_name} is not a credential bundle: {e}") from e
        log.info("Retrieved database credentials for host=%s", creds.host)
        return creds

    def clear(self) -> None:
        # next get_database_credentials() goes back to Secrets Manager
        self._cached = None

class EnvSecretProvider(SecretProviderPort):
    """Local/dev: no bundle, the engine URL comes straight from DATABASE_URL."""

    async def get_database_credentials(self) -> DbCredentials | None:
        return None

    def clear(self) -> None:
        pass

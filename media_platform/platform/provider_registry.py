import logging
from sqlalchemy.engine import URL
from media_platform.core.config import Settings
from media_platform.core.db import Database
from media_platform.platform.ports.object_storage import ObjectStoragePort
from media_platform.platform.ports.cache import CachePort
from media_platform.platform.ports.job_queue import JobQueuePort
from media_platform.platform.ports.secrets import SecretProviderPort
from media_platform.platform.adapters.storage_local import LocalFilesystemStorage
from media_platform.platform.adapters.storage_s3 import S3Storage
from media_platform.platform.adapters.cache_redis import RedisCache
from media_platform.platform.adapters.cache_noop import NoopCache
from media_platform.platform.adapters.queue_sqs import SqsJobQueue
from media_platform.platform.adapters.queue_noop import NoopJobQueue
from media_platform.platform.adapters.secrets_aws import SecretsManagerProvider, EnvSecretProvider

log = logging.getLogger("providers")

class ProviderRegistry:
    """
    Owns every process-wide client (database, cache, object store, queue, secrets).

    One registry per process: the API creates it in its startup hook, the worker at
    cold start. Handlers receive it by injection rather than importing globals.
    Adapters may be passed in explicitly (tests); anything left out is built lazily
    from settings.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        database: Database | None = None,
        object_storage: ObjectStoragePort | None = None,
        cache: CachePort | None = None,
        job_queue: JobQueuePort | None = None,
        secrets: SecretProviderPort | None = None,
    ):
        self.settings = settings
        self.database = database or Database(settings)
        self._object_storage = object_storage
        self._cache = cache
        self._job_queue = job_queue
        self._secrets = secrets
        self.started = False

    def object_storage(self) -> ObjectStoragePort:
        if self._object_storage is None:
            if self.settings.OBJECT_STORAGE_PROVIDER == "s3":
                self._object_storage = S3Storage(self.settings)
            else:
                self._object_storage = LocalFilesystemStorage(self.settings.LOCAL_STORAGE_ROOT)
        return self._object_storage

    def cache(self) -> CachePort:
        if self._cache is None:
            if self.settings.CACHE_PROVIDER == "redis":
                self._cache = RedisCache(self.settings)
            else:
                self._cache = NoopCache()
        return self._cache

    def job_queue(self) -> JobQueuePort:
        if self._job_queue is None:
            if self.settings.QUEUE_PROVIDER == "sqs":
                self._job_queue = SqsJobQueue(self.settings)
            else:
                self._job_queue = NoopJobQueue()
        return self._job_queue

    def secrets(self) -> SecretProviderPort:
        if self._secrets is None:
            if self.settings.DB_CREDENTIALS_PROVIDER == "secrets_manager":
                self._secrets = SecretsManagerProvider(self.settings)
            else:
                self._secrets = EnvSecretProvider()
        return self._secrets

    async def database_url(self) -> str | URL:
        creds = await self.secrets().get_database_credentials()
        if creds is None:
            return self.settings.DATABASE_URL
        return URL.create(
            "postgresql+asyncpg",
            username=creds.username,
            password=creds.password,
            host=creds.host,
            port=creds.port,
            database=creds.database,
        )

    async def startup(self) -> None:
        if self.started:
            return
        # a missing credential bundle is fatal: let SecretRetrievalError propagate
        await self.database.connect(await self.database_url())
        try:
            # the engine connects lazily; surface bad credentials here, not on the first request
            await self.database.ping()
            if self.settings.DB_CREATE_ALL:
                await self.database.create_all()
        except Exception:
            log.error("Database unreachable at startup", exc_info=True)
            await self.database.dispose()
            raise
        self.started = True
        log.info(
            "Providers ready: storage=%s cache=%s queue=%s",
            self.settings.OBJECT_STORAGE_PROVIDER, self.settings.CACHE_PROVIDER, self.settings.QUEUE_PROVIDER,
        )

    async def shutdown(self) -> None:
        if self._cache is not None:
            await self._cache.close()
        await self.database.dispose()
        if self._secrets is not None:
            self._secrets.clear()
        self.started = False

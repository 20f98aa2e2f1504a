import fnmatch
import io
import json
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image

from media_platform.core.config import Settings
from media_platform.core.errors import ObjectNotFoundError
from media_platform.main import create_app
from media_platform.modules.media.models import Media
from media_platform.modules.media.repository import MediaRepository
from media_platform.modules.users.models import User
from media_platform.platform.ports.job_queue import QueueMessage
from media_platform.platform.ports.object_storage import StoredObject
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.worker.pipeline import MediaProcessor


# ---- in-memory ports ----

class InMemoryStorage:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 300) -> str:
        return f"https://storage.test/{key}?method=PUT&expires={expires_seconds}"

    def presign_download(self, key: str, expires_seconds: int = 900) -> str:
        return f"https://storage.test/{key}?method=GET&expires={expires_seconds}"

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = (data, content_type)

    def get(self, key: str) -> StoredObject:
        if key not in self.objects:
            raise ObjectNotFoundError(key)
        data, content_type = self.objects[key]
        return StoredObject(key=key, body=data, content_type=content_type, size=len(data))


class InMemoryCache:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get_json(self, key):
        raw = self.store.get(key)
        return json.loads(raw) if raw is not None else None

    async def set_json(self, key, value, ttl_seconds):
        self.store[key] = json.dumps(value, default=str)
        self.ttls[key] = ttl_seconds

    async def delete(self, *keys):
        deleted = 0
        for k in keys:
            if self.store.pop(k, None) is not None:
                deleted += 1
            self.ttls.pop(k, None)
        return deleted

    async def scan(self, pattern):
        return [k for k in self.store if fnmatch.fnmatchcase(k, pattern)]

    async def ping(self):
        return None

    async def close(self):
        return None


class InMemoryQueue:
    def __init__(self):
        self.sent: list[dict] = []
        self.pending: list[QueueMessage] = []
        self.deleted: list[str] = []

    async def send(self, body: dict) -> str:
        message_id = str(uuid.uuid4())
        self.sent.append(body)
        self.pending.append(QueueMessage(message_id=message_id, receipt_handle=f"rh-{message_id}", body=json.dumps(body)))
        return message_id

    async def receive(self, max_messages: int, wait_seconds: int) -> list[QueueMessage]:
        batch, self.pending = self.pending[:max_messages], self.pending[max_messages:]
        return batch

    async def delete(self, receipt_handle: str) -> None:
        self.deleted.append(receipt_handle)


# ---- helpers ----

def make_image_bytes(width: int, height: int, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size


async def add_user(registry: ProviderRegistry, *, user_id: int | None = None, email: str = "owner@example.com") -> User:
    async with registry.database.session() as session:
        user = User(id=user_id, email=email, username=email.split("@")[0], password_hash="x")
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def add_media(
    registry: ProviderRegistry,
    *,
    user_id: int,
    s3_key: str,
    file_type: str,
    media_id: int | None = None,
    file_name: str | None = None,
) -> Media:
    async with registry.database.session() as session:
        media = Media(
            id=media_id,
            user_id=user_id,
            s3_key=s3_key,
            file_name=file_name or s3_key.rsplit("/", 1)[-1],
            file_type=file_type,
            status="pending",
        )
        session.add(media)
        await session.commit()
        await session.refresh(media)
        return media


async def load_media(registry: ProviderRegistry, media_id: int) -> Media:
    async with registry.database.session() as session:
        return await MediaRepository(session).get(media_id)


# ---- fixtures ----

@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENV="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        DB_CREATE_ALL=True,
        CACHE_PROVIDER="noop",
        QUEUE_PROVIDER="noop",
        OBJECT_STORAGE_PROVIDER="local",
        LOCAL_STORAGE_ROOT=str(tmp_path / "media"),
    )


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def queue():
    return InMemoryQueue()


@pytest.fixture
async def registry(settings, storage, cache, queue):
    reg = ProviderRegistry(settings, object_storage=storage, cache=cache, job_queue=queue)
    await reg.startup()
    yield reg
    await reg.shutdown()


@pytest.fixture
def processor(registry):
    return MediaProcessor(registry)


@pytest.fixture
async def client(registry):
    app = create_app(registry)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

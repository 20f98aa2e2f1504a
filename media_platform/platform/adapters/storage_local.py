import mimetypes
import os
from urllib.parse import quote
from media_platform.core.errors import ObjectNotFoundError
from media_platform.platform.ports.object_storage import ObjectStoragePort, StoredObject

class LocalFilesystemStorage(ObjectStoragePort):
    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        path = os.path.normpath(os.path.join(self.root, key.lstrip("/")))
        if os.path.commonpath([self.root, path]) != self.root:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 300) -> str:
        # no signing locally; the client writes to the path directly
        return f"file://{quote(self._path(key))}"

    def presign_download(self, key: str, expires_seconds: int = 900) -> str:
        return f"file://{quote(self._path(key))}"

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def get(self, key: str) -> StoredObject:
        path = self._path(key)
        if not os.path.isfile(path):
            raise ObjectNotFoundError(key)
        with open(path, "rb") as f:
            body = f.read()
        content_type, _ = mimetypes.guess_type(path)
        return StoredObject(key=key, body=body, content_type=content_type, size=len(body))

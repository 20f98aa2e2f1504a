import logging
from botocore.exceptions import ClientError
from media_platform.core.config import Settings
from media_platform.core.errors import ObjectNotFoundError
from media_platform.platform.ports.object_storage import ObjectStoragePort, StoredObject
from media_platform.platform.adapters.aws import make_client

log = logging.getLogger("storage.s3")

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}

class S3Storage(ObjectStoragePort):
    def __init__(self, settings: Settings, client=None):
        self.s3 = client or make_client(
            "s3", settings, endpoint_url=settings.S3_ENDPOINT_URL, signature_version="s3v4"
        )
        self.bucket = settings.S3_MEDIA_BUCKET

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 300) -> str:
        return self.s3.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=expires_seconds,
            HttpMethod="PUT",
        )

    def presign_download(self, key: str, expires_seconds: int = 900) -> str:
        return self.s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_seconds,
        )

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self.s3.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        log.debug("PUT s3://%s/%s (%d bytes)", self.bucket, key, len(data))

    def get(self, key: str) -> StoredObject:
        try:
            resp = self.s3.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from e
            raise
        body = resp["Body"].read()
        return StoredObject(
            key=key,
            body=body,
            content_type=resp.get("ContentType"),
            size=int(resp.get("ContentLength", len(body))),
        )

"""
Per-kind transforms run by the processing worker.

Every transform receives the original object, writes its derivatives to the
object store before returning, and returns the metadata to persist.

* image/*  300x300 crop-to-fill thumbnail (q80) + medium fit-inside 800x800 (q85)
* video/*  placeholder thumbnail, duration/codec left as sentinels
* other    size and content type only, no derivative
"""

import io
import logging
import posixpath
from functools import lru_cache, partial

import anyio
from PIL import Image, ImageOps

from media_platform.modules.media.jobs import JobDescriptor
from media_platform.modules.media.metadata import BaseMetadata, ImageMetadata, VideoMetadata, FileMetadata
from media_platform.platform.ports.object_storage import ObjectStoragePort, StoredObject

log = logging.getLogger("media.transforms")

THUMBNAIL_SIZE = (300, 300)
THUMBNAIL_QUALITY = 80
MEDIUM_MAX_SIZE = (800, 800)
MEDIUM_QUALITY = 85
THUMB_SUFFIX = "_thumb.jpg"
MEDIUM_SUFFIX = "_medium.jpg"
JPEG = "image/jpeg"


def derivative_key(object_key: str, suffix: str) -> str:
    """uploads/7/1700000000-cat.jpg -> uploads/7/1700000000-cat<suffix>"""
    head, tail = posixpath.split(object_key)
    stem, _ext = posixpath.splitext(tail)
    return posixpath.join(head, stem + suffix) if head else stem + suffix


def encode_jpeg(img: Image.Image, quality: int) -> bytes:
    if img.mode != "RGB":
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def render_image(body: bytes) -> tuple[int, int, str, bytes, bytes]:
    """Decode once, return (width, height, format, thumbnail_jpeg, medium_jpeg)."""
    with Image.open(io.BytesIO(body)) as img:
        # open() is lazy; load() surfaces truncated/corrupt data here instead of at resize time
        img.load()
        width, height = img.size
        fmt = (img.format or "unknown").lower()

        # crop-to-fill, upscales sources smaller than the target
        thumb = ImageOps.fit(img, THUMBNAIL_SIZE, method=Image.Resampling.LANCZOS)

        # fit inside, aspect preserved, thumbnail() never enlarges
        medium = img.copy()
        medium.thumbnail(MEDIUM_MAX_SIZE, Image.Resampling.LANCZOS)

        return width, height, fmt, encode_jpeg(thumb, THUMBNAIL_QUALITY), encode_jpeg(medium, MEDIUM_QUALITY)


@lru_cache(maxsize=1)
def placeholder_thumbnail() -> bytes:
    return encode_jpeg(Image.new("RGB", THUMBNAIL_SIZE, (128, 128, 128)), THUMBNAIL_QUALITY)


async def _put(storage: ObjectStoragePort, key: str, data: bytes, content_type: str) -> None:
    await anyio.to_thread.run_sync(partial(storage.put_bytes, key, data, content_type))


async def transform_image(storage: ObjectStoragePort, job: JobDescriptor, original: StoredObject) -> ImageMetadata:
    log.info("Processing image: %s", job.object_key)
    width, height, fmt, thumb, medium = await anyio.to_thread.run_sync(render_image, original.body)

    thumbnail_key = derivative_key(job.object_key, THUMB_SUFFIX)
    medium_key = derivative_key(job.object_key, MEDIUM_SUFFIX)
    await _put(storage, thumbnail_key, thumb, JPEG)
    await _put(storage, medium_key, medium, JPEG)

    return ImageMetadata(
        size=original.size,
        content_type=original.content_type or job.declared_type,
        width=width,
        height=height,
        format=fmt,
        thumbnail_key=thumbnail_key,
        medium_key=medium_key,
    )


async def transform_video(storage: ObjectStoragePort, job: JobDescriptor, original: StoredObject) -> VideoMetadata:
    # No transcoding or frame grab yet. Replace this body only; callers rely on
    # one thumbnail key plus duration/codec being present.
    log.info("Processing video: %s", job.object_key)
    thumbnail_key = derivative_key(job.object_key, THUMB_SUFFIX)
    await _put(storage, thumbnail_key, placeholder_thumbnail(), JPEG)
    return VideoMetadata(
        size=original.size,
        content_type=original.content_type or job.declared_type,
        thumbnail_key=thumbnail_key,
    )


async def transform_passthrough(storage: ObjectStoragePort, job: JobDescriptor, original: StoredObject) -> FileMetadata:
    return FileMetadata(size=original.size, content_type=original.content_type or job.declared_type)


async def transform(storage: ObjectStoragePort, job: JobDescriptor, original: StoredObject) -> BaseMetadata:
    kind = job.declared_type.lower()
    if kind.startswith("image/"):
        return await transform_image(storage, job, original)
    if kind.startswith("video/"):
        return await transform_video(storage, job, original)
    return await transform_passthrough(storage, job, original)

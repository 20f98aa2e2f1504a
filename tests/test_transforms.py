import io

import pytest
from PIL import Image
from pydantic import ValidationError

from media_platform.modules.media.jobs import JobDescriptor
from media_platform.modules.media.metadata import FileMetadata, ImageMetadata, VideoMetadata, parse_metadata
from media_platform.modules.media.models import Media
from media_platform.modules.media.schemas import MediaOut
from media_platform.platform.ports.object_storage import StoredObject
from media_platform.worker.transforms import (
    MEDIUM_SUFFIX,
    THUMB_SUFFIX,
    derivative_key,
    placeholder_thumbnail,
    render_image,
    transform,
)
from tests.conftest import InMemoryStorage, image_size, make_image_bytes


@pytest.mark.parametrize(
    "key,expected",
    [
        ("uploads/7/1700000000-cat.jpg", "uploads/7/1700000000-cat_thumb.jpg"),
        ("uploads/7/1700000000-cat.PNG", "uploads/7/1700000000-cat_thumb.jpg"),
        ("uploads/7/archive.tar.gz", "uploads/7/archive.tar_thumb.jpg"),
        ("uploads/7/noext", "uploads/7/noext_thumb.jpg"),
        ("uploads/a.b/noext", "uploads/a.b/noext_thumb.jpg"),
        ("cat.jpg", "cat_thumb.jpg"),
    ],
)
def test_derivative_key(key, expected):
    assert derivative_key(key, THUMB_SUFFIX) == expected


def test_derivative_keys_differ_from_original_and_each_other():
    key = "uploads/7/1700000000-cat.jpg"
    thumb, medium = derivative_key(key, THUMB_SUFFIX), derivative_key(key, MEDIUM_SUFFIX)
    assert len({key, thumb, medium}) == 3


@pytest.mark.parametrize("size", [(1000, 500), (500, 1000), (300, 300), (120, 80), (2400, 1600), (1, 1)])
def test_thumbnail_is_always_exact_square(size):
    _, _, _, thumb, _ = render_image(make_image_bytes(*size))
    assert image_size(thumb) == (300, 300)


@pytest.mark.parametrize(
    "size,expected",
    [
        ((1000, 500), (800, 400)),
        ((500, 1000), (400, 800)),
        ((2400, 1600), (800, 533)),
        ((800, 800), (800, 800)),
        ((120, 80), (120, 80)),
    ],
)
def test_medium_fits_inside_and_never_enlarges(size, expected):
    width, height, _, _, medium = render_image(make_image_bytes(*size))
    assert (width, height) == size
    mw, mh = image_size(medium)
    assert max(mw, mh) <= 800
    assert abs(mw - expected[0]) <= 1 and abs(mh - expected[1]) <= 1


def test_render_reports_source_format_lowercase():
    _, _, fmt, thumb, medium = render_image(make_image_bytes(640, 480, fmt="PNG", mode="RGBA"))
    assert fmt == "png"
    # derivatives are always JPEG regardless of source
    for data in (thumb, medium):
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"


def test_render_handles_palette_gif():
    _, _, fmt, thumb, _ = render_image(make_image_bytes(64, 32, fmt="GIF", mode="P"))
    assert fmt == "gif"
    assert image_size(thumb) == (300, 300)


def test_render_rejects_non_image_bytes():
    with pytest.raises(OSError):
        render_image(b"definitely not an image")


def test_render_rejects_truncated_image():
    data = make_image_bytes(1000, 500)
    with pytest.raises(OSError):
        render_image(data[: len(data) // 2])


def test_placeholder_is_grey_square_jpeg():
    data = placeholder_thumbnail()
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.size == (300, 300)
        r, g, b = img.getpixel((150, 150))
        assert abs(r - 128) < 4 and abs(g - 128) < 4 and abs(b - 128) < 4


def _job(key: str, file_type: str) -> JobDescriptor:
    return JobDescriptor(media_id=1, owner_id=7, object_key=key, declared_type=file_type)


async def test_transform_image_writes_both_derivatives():
    storage = InMemoryStorage()
    body = make_image_bytes(1000, 500)
    key = "uploads/7/1700000000-cat.jpg"
    original = StoredObject(key=key, body=body, content_type="image/jpeg", size=len(body))

    meta = await transform(storage, _job(key, "image/jpeg"), original)

    assert isinstance(meta, ImageMetadata)
    assert (meta.width, meta.height, meta.format) == (1000, 500, "jpeg")
    assert meta.thumbnail_key == "uploads/7/1700000000-cat_thumb.jpg"
    assert meta.medium_key == "uploads/7/1700000000-cat_medium.jpg"
    assert image_size(storage.objects[meta.thumbnail_key][0]) == (300, 300)
    assert image_size(storage.objects[meta.medium_key][0]) == (800, 400)
    assert storage.objects[meta.thumbnail_key][1] == "image/jpeg"


async def test_transform_video_writes_placeholder_only():
    storage = InMemoryStorage()
    key = "uploads/7/1700000001-clip.mp4"
    original = StoredObject(key=key, body=b"\x00" * 2048, content_type="video/mp4", size=2048)

    meta = await transform(storage, _job(key, "video/mp4"), original)

    assert isinstance(meta, VideoMetadata)
    assert meta.thumbnail_key == "uploads/7/1700000001-clip_thumb.jpg"
    assert (meta.duration, meta.codec, meta.size) == (0.0, "unknown", 2048)
    assert list(storage.objects) == [meta.thumbnail_key]
    assert storage.objects[meta.thumbnail_key][0] == placeholder_thumbnail()


async def test_transform_passthrough_writes_nothing():
    storage = InMemoryStorage()
    key = "uploads/7/1700000002-doc.pdf"
    original = StoredObject(key=key, body=b"%PDF-1.4", content_type=None, size=8)

    meta = await transform(storage, _job(key, "application/pdf"), original)

    assert isinstance(meta, FileMetadata)
    assert meta.thumbnail_key is None
    assert meta.content_type == "application/pdf"
    assert storage.objects == {}


def test_metadata_serializes_camel_case():
    meta = ImageMetadata(
        size=10, content_type="image/jpeg", width=2, height=1, format="jpeg",
        thumbnail_key="a_thumb.jpg", medium_key="a_medium.jpg",
    )
    data = meta.to_json()
    assert data["kind"] == "image"
    assert data["thumbnailKey"] == "a_thumb.jpg"
    assert data["mediumKey"] == "a_medium.jpg"
    assert data["contentType"] == "image/jpeg"


@pytest.mark.parametrize(
    "meta",
    [
        ImageMetadata(size=10, content_type="image/jpeg", width=2, height=1, format="jpeg",
                      thumbnail_key="a_thumb.jpg", medium_key="a_medium.jpg"),
        VideoMetadata(size=20, content_type="video/mp4", thumbnail_key="v_thumb.jpg"),
        FileMetadata(size=30, content_type="image/gif"),
    ],
    ids=["image", "video", "file"],
)
def test_stored_metadata_reads_back_as_its_kind(meta):
    row = Media(
        id=1, user_id=7, s3_key="uploads/7/x", file_name="x", file_type=meta.content_type,
        status="ready", media_metadata=meta.to_json(),
    )

    out = MediaOut.from_model(row)

    assert type(out.metadata) is type(meta)
    assert out.metadata == meta
    assert parse_metadata(meta.to_json()) == meta
    assert out.model_dump(by_alias=True, mode="json")["metadata"] == meta.to_json()


def test_parse_metadata_rejects_unknown_kind():
    assert parse_metadata(None) is None
    with pytest.raises(ValidationError):
        parse_metadata({"kind": "audio", "size": 1})

"""
Metadata written by the processing worker, one shape per media kind.

Stored as JSON on the media row and parsed back into the matching model when
the status/listing endpoints build their responses. Field names on the wire
stay camelCase (``thumbnailKey``, ``contentType`` ...); ``kind`` discriminates.
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

# video placeholder values until real probing exists
UNKNOWN_DURATION = 0.0
UNKNOWN_CODEC = "unknown"


class BaseMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    size: int
    content_type: str | None = None
    thumbnail_key: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ImageMetadata(BaseMetadata):
    kind: Literal["image"] = "image"
    width: int
    height: int
    format: str
    thumbnail_key: str
    medium_key: str


class VideoMetadata(BaseMetadata):
    kind: Literal["video"] = "video"
    duration: float = UNKNOWN_DURATION
    codec: str = UNKNOWN_CODEC
    thumbnail_key: str


class FileMetadata(BaseMetadata):
    """Pass-through for anything that is neither image nor video: no derivative."""
    kind: Literal["file"] = "file"


MediaMetadata = Annotated[Union[ImageMetadata, VideoMetadata, FileMetadata], Field(discriminator="kind")]

_adapter = TypeAdapter(MediaMetadata)


def parse_metadata(data: dict | None) -> BaseMetadata | None:
    if not data:
        return None
    return _adapter.validate_python(data)

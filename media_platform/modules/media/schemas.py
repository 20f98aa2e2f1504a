from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from media_platform.modules.media.models import Media
from media_platform.modules.media.metadata import MediaMetadata, parse_metadata

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class UploadUrlIn(CamelModel):
    file_name: str = Field(..., min_length=1, max_length=200)
    file_type: str = Field(..., min_length=1, max_length=100)

class UploadUrlOut(CamelModel):
    upload_url: str
    media_id: int
    s3_key: str

class ConfirmOut(CamelModel):
    message: str
    media_id: int

class MediaOut(CamelModel):
    id: int
    status: str
    file_name: str
    file_type: str
    metadata: Optional[MediaMetadata] = None
    thumbnail_key: str | None = None
    error_detail: str | None = None
    created_at: datetime | None = None
    processed_at: datetime | None = None

    @classmethod
    def from_model(cls, m: Media) -> "MediaOut":
        return cls(
            id=m.id,
            status=m.status,
            file_name=m.file_name,
            file_type=m.file_type,
            metadata=parse_metadata(m.media_metadata),
            thumbnail_key=m.thumbnail_key,
            error_detail=m.error_message if m.status == "failed" else None,
            created_at=m.created_at,
            processed_at=m.processed_at,
        )

class SharedMediaOut(MediaOut):
    shared_by: int
    shared_at: datetime | None = None

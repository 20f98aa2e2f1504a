"""
Job descriptor carried on the processing queue.

Wire format (no version field, producer and consumer deploy together)::

    {"mediaId": "42", "userId": "7", "s3Key": "uploads/7/1700000000-cat.jpg", "fileType": "image/jpeg"}
"""

import json
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from media_platform.core.errors import JobParseError


class JobDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    media_id: int = Field(alias="mediaId")
    owner_id: int = Field(alias="userId")
    object_key: str = Field(alias="s3Key", min_length=1)
    declared_type: str = Field(alias="fileType", min_length=1)

    def to_message(self) -> dict:
        return {
            "mediaId": str(self.media_id),
            "userId": str(self.owner_id),
            "s3Key": self.object_key,
            "fileType": self.declared_type,
        }


def parse_job(body: str | bytes) -> JobDescriptor:
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise JobParseError(f"Job body is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise JobParseError("Job body must be a JSON object")
    try:
        return JobDescriptor.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise JobParseError(f"Invalid job descriptor ({missing})") from e

from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, JSON, TIMESTAMP, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import JSONB
from media_platform.core.base import Base, TimestampedMixin

# pending -> processing -> ready | failed
TERMINAL_STATUSES = ("ready", "failed")

class Media(Base, TimestampedMixin):
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    # key of the original upload; derivative keys are computed from it
    s3_key: Mapped[str] = mapped_column(String(500))
    file_name: Mapped[str] = mapped_column(String(255))
    file_type: Mapped[str] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(50), default="pending", index=True)
    # "metadata" is reserved on declarative classes, so the attribute name differs from the column
    media_metadata: Mapped[dict | None] = mapped_column(
        "metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    thumbnail_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

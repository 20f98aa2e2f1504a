from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from media_platform.core.base import Base, TimestampedMixin

class User(Base, TimestampedMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(100))
    password_hash: Mapped[str] = mapped_column(String(255))

from typing import Sequence
from sqlalchemy import select, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.modules.media.models import Media
from media_platform.modules.shares.models import SharedMedia

class ShareRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(SharedMedia)
        if dialect == "sqlite":
            return sqlite.insert(SharedMedia)
        return None

    async def create_if_absent(self, *, media_id: int, from_user_id: int, to_user_id: int) -> bool:
        """INSERT ... ON CONFLICT (media_id, to_user_id) DO NOTHING. Returns True if a row was added."""
        values = {"media_id": media_id, "from_user_id": from_user_id, "to_user_id": to_user_id}
        stmt = self._insert()
        if stmt is None:
            existing = await self.session.execute(
                select(SharedMedia.id).where(SharedMedia.media_id == media_id, SharedMedia.to_user_id == to_user_id)
            )
            if existing.first():
                return False
            res = await self.session.execute(insert(SharedMedia).values(**values))
            return res.rowcount > 0
        res = await self.session.execute(
            stmt.values(**values).on_conflict_do_nothing(index_elements=["media_id", "to_user_id"])
        )
        return res.rowcount > 0

    async def list_shared_with(self, to_user_id: int, *, limit: int) -> Sequence[tuple[Media, SharedMedia]]:
        q = (
            select(Media, SharedMedia)
            .join(SharedMedia, SharedMedia.media_id == Media.id)
            .where(SharedMedia.to_user_id == to_user_id)
            .order_by(SharedMedia.created_at.desc(), SharedMedia.id.desc())
            .limit(limit)
        )
        res = await self.session.execute(q)
        return res.tuples().all()

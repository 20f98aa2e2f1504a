from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.modules.users.models import User

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, *, email: str, username: str, password_hash: str) -> User:
        obj = User(email=email, username=username, password_hash=password_hash)
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        res = await self.session.execute(select(User).where(User.email == email))
        return res.scalar_one_or_none()

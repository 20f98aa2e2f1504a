import logging
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.core.security import hash_password, verify_password, create_access_token
from media_platform.modules.users.repository import UserRepository
from media_platform.modules.users.schemas import RegisterIn, LoginIn, AuthOut, UserOut

log = logging.getLogger("auth")

class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UserRepository(session)

    async def register(self, payload: RegisterIn) -> AuthOut:
        email = payload.email.lower()
        if await self.repo.get_by_email(email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        try:
            user = await self.repo.create(
                email=email, username=payload.username, password_hash=hash_password(payload.password)
            )
            await self.session.commit()
        except IntegrityError:
            # lost a race against a concurrent registration with the same email
            await self.session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        log.info("Registered user id=%s", user.id)
        return AuthOut(user=UserOut.model_validate(user), token=create_access_token(user.id))

    async def login(self, payload: LoginIn) -> AuthOut:
        user = await self.repo.get_by_email(payload.email.lower())
        # same answer for unknown email and wrong password
        if not user or not verify_password(payload.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
        return AuthOut(user=UserOut.model_validate(user), token=create_access_token(user.id))

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.api.deps import get_session
from media_platform.modules.users.schemas import RegisterIn, LoginIn, AuthOut
from media_platform.modules.users.service import AuthService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)

@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, service: AuthService = Depends(svc)):
    return await service.register(payload)

@router.post("/login", response_model=AuthOut)
async def login(payload: LoginIn, service: AuthService = Depends(svc)):
    return await service.login(payload)

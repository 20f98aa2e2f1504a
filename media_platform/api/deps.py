from typing import AsyncIterator
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.platform.provider_registry import ProviderRegistry

def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry

async def get_session(registry: ProviderRegistry = Depends(get_registry)) -> AsyncIterator[AsyncSession]:
    async with registry.database.session() as session:
        yield session

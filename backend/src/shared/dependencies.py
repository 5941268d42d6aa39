from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.sessions import SessionRegistry
from shared.infrastructure.database import async_session

session_registry = SessionRegistry()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


def get_session_registry() -> SessionRegistry:
    return session_registry

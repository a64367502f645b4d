from contextlib import asynccontextmanager
from typing import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClientSession

from app.core.config import get_settings
from app.models.user import User


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncIOMotorClientSession | None]:
    """Yield a session with an open transaction, or None when transactions are off.

    The transaction commits when the block exits normally and aborts on error.
    """
    if not get_settings().mongodb_transactions:
        yield None
        return
    client = User.get_motor_collection().database.client
    async with await client.start_session() as session:
        async with session.start_transaction():
            yield session

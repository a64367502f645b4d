"""Read-only listing of a user's conversations."""

from typing import AsyncIterator

from beanie import PydanticObjectId

from app.core.config import get_settings
from app.models.conversation import Conversation

DEFAULT_TITLE = "New conversation"


async def list_conversations(user_id: PydanticObjectId) -> AsyncIterator[dict]:
    """
    Yield the most recent conversations, newest first.

    Recency is updated_at, or created_at for threads never updated. The
    iterator is single-pass and stops after the configured limit.
    """
    limit = get_settings().conversation_list_limit
    pipeline = [
        {"$addFields": {"effective_at": {"$ifNull": ["$updated_at", "$created_at"]}}},
        {"$sort": {"effective_at": -1}},
        {"$limit": limit},
        {"$project": {"title": 1, "mode": 1, "effective_at": 1}},
    ]
    cursor = Conversation.find(Conversation.user_id == user_id).aggregate(pipeline)
    async for doc in cursor:
        effective_at = doc.get("effective_at")
        yield {
            "id": str(doc["_id"]),
            "title": doc.get("title") or DEFAULT_TITLE,
            "mode": doc.get("mode") or "general",
            "updatedAt": effective_at.isoformat() if effective_at else None,
        }

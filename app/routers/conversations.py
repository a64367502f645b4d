from fastapi import APIRouter, Depends

from app.core.responses import success
from app.deps import get_current_user
from app.models.user import User
from app.services import conversations as conversations_service

router = APIRouter()


@router.get("")
async def conversations_list(user: User = Depends(get_current_user)):
    """List the caller's conversations, most recent first (max 50)."""
    items = [c async for c in conversations_service.list_conversations(user.id)]
    return success(items)

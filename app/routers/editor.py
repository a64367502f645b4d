from fastapi import APIRouter, Depends

from app.core.responses import success
from app.deps import get_current_user
from app.models.user import User
from app.services.editor import TokenIssuer, get_token_issuer

router = APIRouter()


@router.post("/token")
async def editor_token(
    user: User = Depends(get_current_user),
    issue: TokenIssuer = Depends(get_token_issuer),
):
    """Issue an embed token for the hosted image editor."""
    return success({"token": issue()})

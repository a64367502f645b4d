from fastapi import APIRouter, Depends, Query

from app.core.pagination import page_info
from app.core.responses import success
from app.deps import get_current_user
from app.models.user import User
from app.services import credits as credits_service

router = APIRouter()


@router.get("/balance")
async def credits_balance(user: User = Depends(get_current_user)):
    """Return current credit balance, credits used and plan."""
    return success(credits_service.get_balance(user))


@router.get("/history")
async def credits_history(
    user: User = Depends(get_current_user),
    page: int = Query(1),
    limit: int = Query(20),
):
    """Return ledger entries for current user (newest first). Out-of-range page/limit are clamped."""
    entries, total, page, limit = await credits_service.list_history(user.id, page, limit)
    return success(
        {
            "transactions": [
                {
                    "id": str(e.id),
                    "amount": e.amount,
                    "type": e.type,
                    "action": e.action,
                    "description": e.description,
                    "balanceAfter": e.balance_after,
                    "createdAt": e.created_at.isoformat(),
                }
                for e in entries
            ],
            "pagination": page_info(page, limit, total),
        }
    )

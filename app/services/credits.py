"""Credits ledger: every balance change is one CreditTransaction plus one counter update."""

from datetime import datetime

from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Inc, Set

from app.core.config import get_settings
from app.core.exceptions import InsufficientCreditsError, InvalidInputError, NotFoundError
from app.core.logging import get_logger
from app.core.pagination import paginate
from app.db.transaction import transaction
from app.models.credit_transaction import CreditTransaction, TransactionType
from app.models.user import User

log = get_logger(__name__)

TRANSACTION_TYPES = ("purchase", "usage", "refund", "bonus")

CREDIT_COSTS: dict[str, int] = {
    "image-gen": 10,
    "video-gen": 25,
    "image-to-video": 15,
    "remove-bg": 2,
    "upscale": 3,
    "gen-fill": 5,
    "expand": 5,
    "sharpen": 2,
    "denoise": 2,
    "face-swap": 5,
    "object-remove": 3,
    "bg-change": 4,
    "edit": 5,
    "chat": 1,
}


def credit_cost(action: str) -> int:
    return CREDIT_COSTS.get(action, 0)


def used_delta(amount: int, type_: str) -> int:
    """Change to credits_used implied by an entry: usage raises it, refund lowers it."""
    if type_ in ("usage", "refund"):
        return -amount
    return 0


def _check_amount(amount: int, type_: str) -> None:
    if type_ not in TRANSACTION_TYPES:
        raise InvalidInputError(issues=[{"path": ["type"], "message": f"Invalid transaction type: {type_}"}])
    if amount == 0:
        raise InvalidInputError(issues=[{"path": ["amount"], "message": "Amount must be non-zero"}])
    if type_ == "usage" and amount > 0:
        raise InvalidInputError(issues=[{"path": ["amount"], "message": "Usage amount must be negative"}])
    if type_ != "usage" and amount < 0:
        raise InvalidInputError(issues=[{"path": ["amount"], "message": f"{type_} amount must be positive"}])


async def append_entry(
    user_id: PydanticObjectId,
    amount: int,
    type_: TransactionType,
    action: str | None = None,
    job_id: PydanticObjectId | None = None,
    description: str | None = None,
) -> CreditTransaction:
    """
    Record a ledger entry and move the user's counters by the same delta, all or nothing.

    Usage entries only apply while the balance covers them; the check and the
    decrement are one conditional update, so concurrent spends cannot overdraw.
    """
    _check_amount(amount, type_)
    used = used_delta(amount, type_)
    filters = [User.id == user_id]
    if type_ == "usage":
        filters.append(User.credits_balance >= -amount)

    async with transaction() as session:
        updated = await User.find_one(*filters, session=session).update(
            Inc({User.credits_balance: amount, User.credits_used: used}),
            Set({User.updated_at: datetime.utcnow()}),
            session=session,
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        if updated is None:
            if await User.get(user_id, session=session) is None:
                raise NotFoundError("User not found")
            log.info("insufficient_credits", user_id=str(user_id), amount=amount, action=action)
            raise InsufficientCreditsError(details={"required": -amount})

        entry = CreditTransaction(
            user_id=user_id,
            amount=amount,
            type=type_,
            balance_after=updated.credits_balance,
            action=action,
            job_id=job_id,
            description=description,
        )
        try:
            await entry.insert(session=session)
        except Exception:
            if session is None:
                try:
                    await _compensate(user_id, amount, used)
                except Exception:
                    log.exception("ledger_compensation_failed", user_id=str(user_id), amount=amount)
            raise

    log.info(
        "ledger_entry_applied",
        user_id=str(user_id),
        entry_id=str(entry.id),
        type=type_,
        amount=amount,
        balance_after=entry.balance_after,
    )
    return entry


async def _compensate(user_id: PydanticObjectId, amount: int, used: int) -> None:
    """Undo a counter update whose ledger row could not be written (no-transaction mode)."""
    await User.find_one(User.id == user_id).update(
        Inc({User.credits_balance: -amount, User.credits_used: -used}),
    )
    log.warning("ledger_entry_compensated", user_id=str(user_id), amount=amount)


def get_balance(user: User) -> dict:
    """Read-only projection of the user's credit state."""
    return {"balance": user.credits_balance, "used": user.credits_used, "plan": user.plan}


async def list_history(
    user_id: PydanticObjectId, page: int = 1, limit: int = 20
) -> tuple[list[CreditTransaction], int, int, int]:
    """Ledger entries newest first; returns (entries, total, page, limit)."""
    page, limit, skip = paginate(page, limit, max_limit=get_settings().credit_history_max_limit)
    total = await CreditTransaction.find(CreditTransaction.user_id == user_id).count()
    entries = await (
        CreditTransaction.find(CreditTransaction.user_id == user_id)
        .sort(-CreditTransaction.created_at)
        .skip(skip)
        .limit(limit)
        .to_list()
    )
    return entries, total, page, limit


async def charge_for_action(
    user_id: PydanticObjectId,
    action: str,
    job_id: PydanticObjectId | None = None,
    description: str | None = None,
) -> CreditTransaction | None:
    """Spend the cost of an action; None when the action is free."""
    cost = credit_cost(action)
    if cost == 0:
        return None
    return await append_entry(
        user_id,
        -cost,
        "usage",
        action=action,
        job_id=job_id,
        description=description or f"Used {cost} credits for {action}",
    )


async def refund_action(
    user_id: PydanticObjectId,
    action: str,
    job_id: PydanticObjectId | None = None,
) -> CreditTransaction | None:
    cost = credit_cost(action)
    if cost == 0:
        return None
    return await append_entry(
        user_id,
        cost,
        "refund",
        action=action,
        job_id=job_id,
        description=f"Refund of {cost} credits for failed {action}",
    )


async def add_credits(
    user_id: PydanticObjectId,
    amount: int,
    description: str,
    type_: TransactionType = "purchase",
) -> CreditTransaction:
    if type_ not in ("purchase", "bonus"):
        raise InvalidInputError(issues=[{"path": ["type"], "message": "Only purchase or bonus can add credits"}])
    return await append_entry(user_id, amount, type_, description=description)


async def reconcile(user_id: PydanticObjectId) -> dict:
    """Compare stored counters with what the ledger implies."""
    user = await User.get(user_id)
    if not user:
        raise NotFoundError("User not found")
    expected_balance = user.initial_credits
    expected_used = 0
    async for entry in CreditTransaction.find(CreditTransaction.user_id == user_id):
        expected_balance += entry.amount
        expected_used += used_delta(entry.amount, entry.type)
    consistent = expected_balance == user.credits_balance and expected_used == user.credits_used
    if not consistent:
        log.warning(
            "ledger_mismatch",
            user_id=str(user_id),
            balance=user.credits_balance,
            expected_balance=expected_balance,
            used=user.credits_used,
            expected_used=expected_used,
        )
    return {
        "balance": user.credits_balance,
        "used": user.credits_used,
        "expected_balance": expected_balance,
        "expected_used": expected_used,
        "consistent": consistent,
    }

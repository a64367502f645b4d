from datetime import datetime
from typing import Literal

from beanie import Document, PydanticObjectId
from pydantic import Field

TransactionType = Literal["purchase", "usage", "refund", "bonus"]


class CreditTransaction(Document):
    """Append-only ledger row; never updated after insert."""
    user_id: PydanticObjectId
    amount: int  # positive = credit, negative = debit
    type: TransactionType
    balance_after: int
    action: str | None = None  # image-gen, chat, ...
    job_id: PydanticObjectId | None = None
    description: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "credit_transactions"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
        ]

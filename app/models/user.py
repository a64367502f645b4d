from datetime import datetime
from typing import Literal

from beanie import Document, Indexed
from pydantic import Field

Plan = Literal["free", "starter", "pro", "business"]

DEFAULT_CREDITS = 50


class User(Document):
    clerk_id: Indexed(str, unique=True)  # external identity key
    email: str
    name: str = ""
    avatar_url: str | None = None
    plan: Plan = "free"
    # Mutated only through app.services.credits.append_entry
    credits_balance: int = DEFAULT_CREDITS
    credits_used: int = 0
    initial_credits: int = DEFAULT_CREDITS
    stripe_customer_id: str | None = None
    plan_activated_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        indexes = [[("email", 1)]]

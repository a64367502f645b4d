from app.models.user import User
from app.models.credit_transaction import CreditTransaction
from app.models.conversation import Conversation
from app.models.project import Project

__all__ = [
    "User",
    "CreditTransaction",
    "Conversation",
    "Project",
]

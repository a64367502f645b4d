from datetime import datetime
from typing import Literal

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field

ConversationMode = Literal["image", "video", "edit", "general"]


class MessageMetadata(BaseModel):
    suggestions: list[str] = Field(default_factory=list)
    enhanced_prompt: str | None = None
    job_id: PydanticObjectId | None = None


class Message(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = ""
    metadata: MessageMetadata | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Conversation(Document):
    """Chat thread; written by the chat feature, only listed here."""
    user_id: PydanticObjectId
    title: str | None = None
    mode: ConversationMode = "general"
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime | None = None

    class Settings:
        name = "conversations"
        indexes = [
            [("user_id", 1), ("updated_at", -1)],
        ]

from datetime import datetime

from beanie import Document, PydanticObjectId
from pydantic import Field


class Project(Document):
    user_id: PydanticObjectId
    name: str
    description: str | None = None
    thumbnail_url: str | None = None
    files: list[PydanticObjectId] = Field(default_factory=list)
    is_starred: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "projects"
        indexes = [
            [("user_id", 1), ("updated_at", -1)],
        ]

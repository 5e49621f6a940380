from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from harmwatch.models.base import Record, utcnow


class UserRole(str, Enum):
    viewer = "viewer"
    admin = "admin"


class User(Record):
    username: str
    email: str
    password_hash: str = ""
    role: str = UserRole.viewer.value
    contribution_score: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_public(self) -> dict[str, Any]:
        # the hash never leaves the store
        return self.model_dump(by_alias=True, mode="json", exclude={"password_hash"})

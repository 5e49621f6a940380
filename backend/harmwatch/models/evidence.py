from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from harmwatch.models.base import Record, utcnow


class EvidenceType(str, Enum):
    link = "link"
    text = "text"


class Evidence(Record):
    case_id: str
    type: str = EvidenceType.link.value
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    submitted_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

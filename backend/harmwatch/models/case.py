from datetime import datetime
from enum import Enum

from pydantic import Field

from harmwatch.models.base import Record, utcnow


class CaseSeverity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class CaseStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    verified = "verified"
    rejected = "rejected"


class Case(Record):
    title: str
    description: str
    detailed_description: str = ""
    category: str  # open set: bias/privacy/misinformation/...
    severity: str = CaseSeverity.medium.value
    ai_system: str = ""
    company: str = ""
    country: str = ""
    status: str = CaseStatus.pending.value

    views: int = 0
    upvotes: int = 0
    evidence_count: int = 0

    created_by: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

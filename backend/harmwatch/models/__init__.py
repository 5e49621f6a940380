from harmwatch.models.case import Case, CaseSeverity, CaseStatus
from harmwatch.models.evidence import Evidence, EvidenceType
from harmwatch.models.user import User, UserRole

__all__ = ["Case", "CaseSeverity", "CaseStatus", "Evidence", "EvidenceType", "User", "UserRole"]

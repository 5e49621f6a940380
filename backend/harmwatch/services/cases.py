import logging
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from harmwatch.core.config import Settings
from harmwatch.core.errors import ForbiddenError, NotFoundError, StorageError, ValidationError
from harmwatch.db.repository import case_repository, evidence_repository, user_repository
from harmwatch.db.store import JsonStore
from harmwatch.metrics.prometheus import case_updates_total, cases_submitted_total, evidence_added_total
from harmwatch.models import Case, CaseSeverity, CaseStatus, Evidence, EvidenceType, User
from harmwatch.models.base import new_id, utcnow
from harmwatch.services.policy import can_edit

logger = logging.getLogger(__name__)

SEVERITIES = {s.value for s in CaseSeverity}
STATUSES = {s.value for s in CaseStatus}
EVIDENCE_TYPES = {t.value for t in EvidenceType}

# payload key -> Case attribute; anything else in an update is ignored
UPDATABLE_FIELDS = {
    "status": "status",
    "severity": "severity",
    "description": "description",
    "detailedDescription": "detailed_description",
}


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class CasePage(_Wire):
    items: list[Case]
    total: int
    page: int
    limit: int
    total_pages: int


class CaseStatistics(_Wire):
    total_cases: int
    total_evidence: int
    total_users: int
    verified_cases: int
    pending_cases: int
    category_distribution: dict[str, int]
    status_distribution: dict[str, int]
    severity_distribution: dict[str, int]
    recent_cases: list[Case]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _newest_first(cases: list[Case]) -> list[Case]:
    # sorted() is stable with reverse=True, so equal timestamps keep insertion order
    return sorted(cases, key=lambda c: c.created_at, reverse=True)


def evidence_links(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.splitlines()
    if not isinstance(value, list):
        return []
    return [link.strip() for link in value if isinstance(link, str) and link.strip()]


class CaseService:
    def __init__(self, store: JsonStore, settings: Settings):
        self.cases = case_repository(store)
        self.evidence = evidence_repository(store)
        self.users = user_repository(store)
        self.settings = settings

    def list_cases(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> CasePage:
        page = _positive_int(page, 1)
        limit = min(_positive_int(limit, self.settings.default_page_limit), self.settings.max_page_limit)

        cases = self.cases.find_all()
        if category:
            cases = [c for c in cases if c.category == category]
        if status:
            cases = [c for c in cases if c.status == status]
        cases = _newest_first(cases)

        start = (page - 1) * limit
        total = len(cases)
        return CasePage(
            items=cases[start:start + limit],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    def get_case(self, case_id: str) -> tuple[Case, list[Evidence]]:
        case = self.cases.find_by_id(case_id)
        if case is None:
            raise NotFoundError("Case not found")
        evidence = self.evidence.find_where(lambda e: e.case_id == case_id)
        return case, evidence

    def create_case(self, user_id: str, payload: dict[str, Any]) -> Case:
        now = utcnow()
        candidate = {
            "id": new_id(),
            "title": _text(payload.get("title")),
            "description": _text(payload.get("description")),
            "detailed_description": _text(payload.get("detailedDescription")),
            "category": _text(payload.get("category")),
            "severity": _text(payload.get("severity")) or CaseSeverity.medium.value,
            "ai_system": _text(payload.get("aiSystem")),
            "company": _text(payload.get("company")),
            "country": _text(payload.get("country")),
            "status": CaseStatus.pending.value,
            "views": 0,
            "upvotes": 0,
            "evidence_count": 0,
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }

        if not candidate["title"] or not candidate["description"] or not candidate["category"]:
            raise ValidationError("Title, description, and category are required")
        if candidate["severity"] not in SEVERITIES:
            raise ValidationError(f"Invalid severity: {candidate['severity']}")

        case = self.cases.insert(Case(**candidate))
        cases_submitted_total.labels(category=case.category).inc()
        logger.info("Case %s submitted", case.id, extra={"case_id": case.id, "user_id": user_id})

        # the case is already stored: evidence failures are logged and reflected
        # in evidenceCount instead of failing the submission
        links = evidence_links(payload.get("evidenceLinks"))
        saved = 0
        try:
            for link in links:
                self.evidence.insert(
                    Evidence(case_id=case.id, type=EvidenceType.link.value, content=link, submitted_by=user_id)
                )
                saved += 1
                evidence_added_total.labels(type=EvidenceType.link.value).inc()
            if saved:
                case = self.cases.update(case.id, lambda c: setattr(c, "evidence_count", saved)) or case
        except StorageError:
            logger.error(
                "Stored %d of %d evidence links for case %s",
                saved,
                len(links),
                case.id,
                extra={"case_id": case.id, "user_id": user_id},
            )

        return case

    def update_case(self, user: User, case_id: str, payload: dict[str, Any]) -> Case:
        case = self.cases.find_by_id(case_id)
        if case is None:
            case_updates_total.labels(outcome="not_found").inc()
            raise NotFoundError("Case not found")
        if not can_edit(user, case):
            case_updates_total.labels(outcome="forbidden").inc()
            logger.warning(
                "User %s may not edit case %s", user.id, case_id, extra={"case_id": case_id, "user_id": user.id}
            )
            raise ForbiddenError("Not authorized")

        changes = {}
        for key, attr in UPDATABLE_FIELDS.items():
            if payload.get(key) is not None:
                changes[attr] = payload[key]

        try:
            self._check_changes(changes)
        except ValidationError:
            case_updates_total.labels(outcome="invalid").inc()
            raise

        def apply(c: Case) -> None:
            for attr, value in changes.items():
                setattr(c, attr, value)
            c.updated_at = max(utcnow(), c.created_at)

        updated = self.cases.update(case_id, apply)
        if updated is None:
            case_updates_total.labels(outcome="not_found").inc()
            raise NotFoundError("Case not found")

        case_updates_total.labels(outcome="updated").inc()
        return updated

    @staticmethod
    def _check_changes(changes: dict[str, Any]) -> None:
        for attr, value in changes.items():
            if not isinstance(value, str):
                raise ValidationError(f"Invalid value for {attr}")
        if "status" in changes and changes["status"] not in STATUSES:
            raise ValidationError(f"Invalid status: {changes['status']}")
        if "severity" in changes and changes["severity"] not in SEVERITIES:
            raise ValidationError(f"Invalid severity: {changes['severity']}")
        if "description" in changes and not changes["description"].strip():
            raise ValidationError("Description cannot be empty")

    def add_evidence(self, user: User, case_id: str, payload: dict[str, Any]) -> Evidence:
        if self.cases.find_by_id(case_id) is None:
            raise NotFoundError("Case not found")

        content = _text(payload.get("content"))
        evidence_type = _text(payload.get("type")) or EvidenceType.link.value
        metadata = payload.get("metadata") or {}
        if not content:
            raise ValidationError("Evidence content is required")
        if evidence_type not in EVIDENCE_TYPES:
            raise ValidationError(f"Invalid evidence type: {evidence_type}")
        if not isinstance(metadata, dict):
            raise ValidationError("Evidence metadata must be an object")

        evidence = self.evidence.insert(
            Evidence(case_id=case_id, type=evidence_type, content=content, metadata=metadata, submitted_by=user.id)
        )
        evidence_added_total.labels(type=evidence_type).inc()

        # separate write; a crash here leaves evidenceCount one behind
        def bump(c: Case) -> None:
            c.evidence_count += 1
            c.updated_at = max(utcnow(), c.created_at)

        self.cases.update(case_id, bump)
        return evidence

    def compute_statistics(self) -> CaseStatistics:
        cases = self.cases.find_all()

        by_category: dict[str, int] = {}
        by_status: dict[str, int] = {}
        by_severity: dict[str, int] = {}
        for c in cases:
            by_category[c.category] = by_category.get(c.category, 0) + 1
            by_status[c.status] = by_status.get(c.status, 0) + 1
            by_severity[c.severity] = by_severity.get(c.severity, 0) + 1

        return CaseStatistics(
            total_cases=len(cases),
            total_evidence=self.evidence.count(),
            total_users=self.users.count(),
            verified_cases=by_status.get(CaseStatus.verified.value, 0),
            pending_cases=by_status.get(CaseStatus.pending.value, 0),
            category_distribution=by_category,
            status_distribution=by_status,
            severity_distribution=by_severity,
            recent_cases=_newest_first(cases)[: self.settings.recent_cases_count],
        )

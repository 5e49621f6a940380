from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from harmwatch.api.deps import get_case_service, get_current_user
from harmwatch.api.responses import envelope
from harmwatch.models import User
from harmwatch.services.cases import CaseService, evidence_links

router = APIRouter(prefix="/cases", tags=["cases"])


@router.get("")
def list_cases(
    service: CaseService = Depends(get_case_service),
    category: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    # kept as strings: non-numeric values fall back to the defaults
    limit: Optional[str] = Query(default=None),
    page: Optional[str] = Query(default=None),
):
    result = service.list_cases(category=category, status=status, page=page, limit=limit)
    return envelope(
        [c.to_public() for c in result.items],
        pagination={
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "totalPages": result.total_pages,
        },
    )


@router.get("/{case_id}")
def get_case(case_id: str, service: CaseService = Depends(get_case_service)):
    case, evidence = service.get_case(case_id)
    return envelope({**case.to_public(), "evidence": [e.to_public() for e in evidence]})


@router.post("", status_code=201)
def create_case(
    payload: dict[str, Any],
    user: User = Depends(get_current_user),
    service: CaseService = Depends(get_case_service),
):
    case = service.create_case(user.id, payload)
    message = "Case submitted successfully"
    if case.evidence_count < len(evidence_links(payload.get("evidenceLinks"))):
        message = "Case submitted, but some evidence could not be saved"
    return envelope(case.to_public(), message=message)


@router.patch("/{case_id}")
def update_case(
    case_id: str,
    payload: dict[str, Any],
    user: User = Depends(get_current_user),
    service: CaseService = Depends(get_case_service),
):
    case = service.update_case(user, case_id, payload)
    return envelope(case.to_public(), message="Case updated successfully")


@router.post("/{case_id}/evidence", status_code=201)
def add_evidence(
    case_id: str,
    payload: dict[str, Any],
    user: User = Depends(get_current_user),
    service: CaseService = Depends(get_case_service),
):
    evidence = service.add_evidence(user, case_id, payload)
    return envelope(evidence.to_public(), message="Evidence added successfully")

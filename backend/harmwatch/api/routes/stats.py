from fastapi import APIRouter, Depends

from harmwatch.api.deps import get_case_service
from harmwatch.api.responses import envelope
from harmwatch.services.cases import CaseService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def stats(service: CaseService = Depends(get_case_service)):
    return envelope(service.compute_statistics().to_public())

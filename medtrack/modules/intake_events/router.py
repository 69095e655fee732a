from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from medtrack.modules.intake_events.models import IntakeKind
from medtrack.modules.intake_events.schemas import (
    IntakeEventCreate,
    IntakeEventListQuery,
    IntakeEventResponse,
)
from medtrack.modules.intake_events.service import IntakeEventService
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.constants import PermissionLevel
from medtrack.shared.pagination import Page, PageParams, build_meta, pagination_params

router = APIRouter()


async def get_intake_event_query_params(
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    kind: IntakeKind | None = Query(None),
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
) -> IntakeEventListQuery:
    return IntakeEventListQuery(
        patient_profile_id=patient_profile_id, kind=kind, start=start, end=end
    )


@router.get("/", response_model=Page[IntakeEventResponse], summary="List intake events")
async def list_intake_events(
    params: IntakeEventListQuery = Depends(get_intake_event_query_params),
    page: PageParams = Depends(pagination_params),
    current_user: User = Depends(deps.get_current_user),
    service: IntakeEventService = Depends(IntakeEventService),
) -> Page[IntakeEventResponse]:
    await deps.require_patient_access(params.patient_profile_id, current_user)
    total, items = await service.list(params, page)
    return Page[IntakeEventResponse](
        items=[IntakeEventResponse.from_document(item) for item in items],
        meta=build_meta(total, page.page, page.page_size),
    )


@router.post(
    "/",
    response_model=IntakeEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an intake event",
)
async def create_intake_event(
    payload: IntakeEventCreate,
    current_user: User = Depends(deps.get_current_user),
    service: IntakeEventService = Depends(IntakeEventService),
) -> IntakeEventResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    event = await service.record(payload)
    return IntakeEventResponse.from_document(event)

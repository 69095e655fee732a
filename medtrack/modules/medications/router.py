from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from medtrack.modules.medications.models import Medication, MedicationSchedule
from medtrack.modules.medications.schemas import (
    MedicationCreate,
    MedicationListQuery,
    MedicationResponse,
    MedicationScheduleResponse,
    MedicationSort,
    MedicationUpdate,
)
from medtrack.modules.medications.service import MedicationService
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.constants import PermissionLevel, SortOrder
from medtrack.shared.pagination import Page, PageParams, build_meta, pagination_params

router = APIRouter()


def _to_response(
    medication: Medication, schedule: MedicationSchedule | None = None
) -> MedicationResponse:
    return MedicationResponse.from_document(
        medication,
        schedule=MedicationScheduleResponse.from_document(schedule) if schedule else None,
    )


async def get_medication_query_params(
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    search: str | None = Query(None, description="Matches name or notes"),
    start: datetime | None = Query(None, alias="from", description="Earliest start date"),
    end: datetime | None = Query(None, alias="to", description="Latest start date"),
    sort: MedicationSort = Query(MedicationSort.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
) -> MedicationListQuery:
    """Expose query params explicitly so Swagger shows them."""
    return MedicationListQuery(
        patient_profile_id=patient_profile_id,
        search=search,
        start=start,
        end=end,
        sort=sort,
        order=order,
    )


@router.get("/", response_model=Page[MedicationResponse], summary="List medications")
async def list_medications(
    params: MedicationListQuery = Depends(get_medication_query_params),
    page: PageParams = Depends(pagination_params),
    current_user: User = Depends(deps.get_current_user),
    service: MedicationService = Depends(MedicationService),
) -> Page[MedicationResponse]:
    await deps.require_patient_access(params.patient_profile_id, current_user)
    total, items = await service.list(params, page)
    return Page[MedicationResponse](
        items=[_to_response(item) for item in items],
        meta=build_meta(total, page.page, page.page_size),
    )


@router.post(
    "/",
    response_model=MedicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a medication with an optional schedule",
)
async def create_medication(
    payload: MedicationCreate,
    current_user: User = Depends(deps.get_current_user),
    service: MedicationService = Depends(MedicationService),
) -> MedicationResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    medication, schedule = await service.create(payload)
    return _to_response(medication, schedule)


@router.patch(
    "/{medication_id}",
    response_model=MedicationResponse,
    summary="Update a medication and/or its schedule",
)
async def update_medication(
    medication_id: str,
    payload: MedicationUpdate,
    current_user: User = Depends(deps.get_current_user),
    service: MedicationService = Depends(MedicationService),
) -> MedicationResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    try:
        medication, schedule = await service.update(medication_id, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_response(medication, schedule)


@router.delete(
    "/{medication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a medication and its schedule",
)
async def delete_medication(
    medication_id: str,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: MedicationService = Depends(MedicationService),
) -> Response:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        await service.delete(medication_id, patient_profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from medtrack.modules.appointments.models import AppointmentStatus
from medtrack.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentListQuery,
    AppointmentResponse,
    AppointmentSort,
    AppointmentUpdate,
)
from medtrack.modules.appointments.service import AppointmentService
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.constants import PermissionLevel, SortOrder
from medtrack.shared.pagination import Page, PageParams, build_meta, pagination_params

router = APIRouter()


async def get_appointment_query_params(
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    start: datetime | None = Query(None, alias="from"),
    end: datetime | None = Query(None, alias="to"),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    sort: AppointmentSort = Query(AppointmentSort.DATE_TIME),
    order: SortOrder = Query(SortOrder.ASC),
) -> AppointmentListQuery:
    return AppointmentListQuery(
        patient_profile_id=patient_profile_id,
        start=start,
        end=end,
        status=status_filter,
        sort=sort,
        order=order,
    )


@router.get("/", response_model=Page[AppointmentResponse], summary="List appointments")
async def list_appointments(
    params: AppointmentListQuery = Depends(get_appointment_query_params),
    page: PageParams = Depends(pagination_params),
    current_user: User = Depends(deps.get_current_user),
    service: AppointmentService = Depends(AppointmentService),
) -> Page[AppointmentResponse]:
    await deps.require_patient_access(params.patient_profile_id, current_user)
    total, items = await service.list(params, page)
    return Page[AppointmentResponse](
        items=[AppointmentResponse.from_document(item) for item in items],
        meta=build_meta(total, page.page, page.page_size),
    )


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an appointment",
)
async def create_appointment(
    payload: AppointmentCreate,
    current_user: User = Depends(deps.get_current_user),
    service: AppointmentService = Depends(AppointmentService),
) -> AppointmentResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    appointment = await service.create(payload)
    return AppointmentResponse.from_document(appointment)


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    summary="Update an appointment",
)
async def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    current_user: User = Depends(deps.get_current_user),
    service: AppointmentService = Depends(AppointmentService),
) -> AppointmentResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    try:
        appointment = await service.update(appointment_id, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AppointmentResponse.from_document(appointment)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an appointment",
)
async def delete_appointment(
    appointment_id: str,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: AppointmentService = Depends(AppointmentService),
) -> Response:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        await service.delete(appointment_id, patient_profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

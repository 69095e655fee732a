from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from medtrack.modules.treatments.schemas import (
    TreatmentCreate,
    TreatmentListQuery,
    TreatmentMedicationCreate,
    TreatmentMedicationResponse,
    TreatmentMedicationUpdate,
    TreatmentReminderResponse,
    TreatmentResponse,
    TreatmentSort,
    TreatmentUpdate,
)
from medtrack.modules.treatments.service import TreatmentService
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.constants import PermissionLevel, SortOrder
from medtrack.shared.pagination import Page, PageParams, build_meta, pagination_params

router = APIRouter()


async def get_treatment_query_params(
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    active: bool | None = Query(None, description="Only ongoing (true) or finished (false)"),
    search: str | None = Query(None, description="Matches the title"),
    sort: TreatmentSort = Query(TreatmentSort.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
) -> TreatmentListQuery:
    return TreatmentListQuery(
        patient_profile_id=patient_profile_id,
        active=active,
        search=search,
        sort=sort,
        order=order,
    )


def _not_found(exc: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/", response_model=Page[TreatmentResponse], summary="List treatments")
async def list_treatments(
    params: TreatmentListQuery = Depends(get_treatment_query_params),
    page: PageParams = Depends(pagination_params),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> Page[TreatmentResponse]:
    await deps.require_patient_access(params.patient_profile_id, current_user)
    total, items = await service.list(params, page)
    return Page[TreatmentResponse](
        items=[TreatmentResponse.from_document(item) for item in items],
        meta=build_meta(total, page.page, page.page_size),
    )


@router.post(
    "/",
    response_model=TreatmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a treatment with optional reminders",
)
async def create_treatment(
    payload: TreatmentCreate,
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> TreatmentResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    treatment, reminders = await service.create(payload)
    return TreatmentResponse.from_document(
        treatment,
        reminders=[TreatmentReminderResponse.from_document(r) for r in reminders],
    )


@router.patch("/{treatment_id}", response_model=TreatmentResponse, summary="Update a treatment")
async def update_treatment(
    treatment_id: str,
    payload: TreatmentUpdate,
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> TreatmentResponse:
    await deps.require_patient_access(
        payload.patient_profile_id, current_user, PermissionLevel.WRITE
    )
    try:
        treatment = await service.update(treatment_id, payload)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return TreatmentResponse.from_document(treatment)


@router.delete(
    "/{treatment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a treatment with its reminders and medications",
)
async def delete_treatment(
    treatment_id: str,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> Response:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        await service.delete(treatment_id, patient_profile_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{treatment_id}/medications",
    response_model=List[TreatmentMedicationResponse],
    summary="List medications of a treatment",
)
async def list_treatment_medications(
    treatment_id: str,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> List[TreatmentMedicationResponse]:
    await deps.require_patient_access(patient_profile_id, current_user)
    try:
        medications = await service.list_medications(treatment_id, patient_profile_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return [TreatmentMedicationResponse.from_document(m) for m in medications]


@router.post(
    "/{treatment_id}/medications",
    response_model=TreatmentMedicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a medication to a treatment",
)
async def add_treatment_medication(
    treatment_id: str,
    payload: TreatmentMedicationCreate,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> TreatmentMedicationResponse:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        medication = await service.add_medication(treatment_id, patient_profile_id, payload)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return TreatmentMedicationResponse.from_document(medication)


@router.patch(
    "/{treatment_id}/medications/{medication_id}",
    response_model=TreatmentMedicationResponse,
    summary="Update a treatment medication",
)
async def update_treatment_medication(
    treatment_id: str,
    medication_id: str,
    payload: TreatmentMedicationUpdate,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> TreatmentMedicationResponse:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        medication = await service.update_medication(
            treatment_id, medication_id, patient_profile_id, payload
        )
    except LookupError as exc:
        raise _not_found(exc) from exc
    return TreatmentMedicationResponse.from_document(medication)


@router.delete(
    "/{treatment_id}/medications/{medication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a medication from a treatment",
)
async def delete_treatment_medication(
    treatment_id: str,
    medication_id: str,
    patient_profile_id: str = Query(..., alias="patientProfileId"),
    current_user: User = Depends(deps.get_current_user),
    service: TreatmentService = Depends(TreatmentService),
) -> Response:
    await deps.require_patient_access(patient_profile_id, current_user, PermissionLevel.WRITE)
    try:
        await service.delete_medication(treatment_id, medication_id, patient_profile_id)
    except LookupError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)

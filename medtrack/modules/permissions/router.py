from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from medtrack.modules.permissions.schemas import (
    PermissionResponse,
    PermissionUpdate,
    PermissionWithCaregiverResponse,
)
from medtrack.modules.permissions.service import PermissionService
from medtrack.modules.users.models import User
from medtrack.modules.users.schemas import UserSummary
from medtrack.shared import deps

router = APIRouter()


@router.get(
    "/by-patient/{patient_profile_id}",
    response_model=List[PermissionWithCaregiverResponse],
    summary="List caregiver permissions on a patient profile",
)
async def list_patient_permissions(
    patient_profile_id: str,
    current_user: User = Depends(deps.get_current_user),
    service: PermissionService = Depends(PermissionService),
) -> List[PermissionWithCaregiverResponse]:
    try:
        rows = await service.list_for_patient(patient_profile_id, current_user)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return [
        PermissionWithCaregiverResponse.from_document(
            permission,
            caregiver=(
                UserSummary(id=str(caregiver.id), email=caregiver.email, role=caregiver.role)
                if caregiver
                else None
            ),
        )
        for permission, caregiver in rows
    ]


@router.patch(
    "/{permission_id}",
    response_model=PermissionResponse,
    summary="Accept, reject or re-level a caregiver permission",
)
async def update_permission(
    permission_id: str,
    payload: PermissionUpdate,
    current_user: User = Depends(deps.get_current_user),
    service: PermissionService = Depends(PermissionService),
) -> PermissionResponse:
    try:
        permission = await service.update(permission_id, payload, current_user)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return PermissionResponse.from_document(permission)

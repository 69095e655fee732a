from fastapi import APIRouter, Depends, HTTPException, status

from medtrack.modules.patients.schemas import (
    OwnPatientProfileResponse,
    PatientProfileResponse,
    PatientProfileUpdate,
)
from medtrack.modules.patients.service import PatientProfileService
from medtrack.modules.users.models import User
from medtrack.shared import deps

router = APIRouter()


@router.get(
    "/me",
    response_model=OwnPatientProfileResponse,
    summary="Get the authenticated patient's profile",
)
async def read_own_profile(
    current_user: User = Depends(deps.require_patient),
    service: PatientProfileService = Depends(PatientProfileService),
) -> OwnPatientProfileResponse:
    profile = await service.get_for_user(current_user)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NO_PROFILE")
    return OwnPatientProfileResponse.from_document(profile)


@router.put(
    "/me",
    response_model=PatientProfileResponse,
    summary="Create or replace the authenticated patient's profile",
)
async def upsert_own_profile(
    payload: PatientProfileUpdate,
    current_user: User = Depends(deps.require_patient),
    service: PatientProfileService = Depends(PatientProfileService),
) -> PatientProfileResponse:
    profile = await service.upsert_for_user(current_user, payload)
    return PatientProfileResponse.from_document(profile)

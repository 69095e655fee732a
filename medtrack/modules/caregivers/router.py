from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from medtrack.modules.caregivers.models import CaregiverProfile
from medtrack.modules.caregivers.schemas import (
    CaregiverProfileResponse,
    CaregiverProfileUpdate,
    InviteCodeResponse,
    JoinRequest,
    JoinResponse,
)
from medtrack.modules.caregivers.service import CaregiverService
from medtrack.modules.patients.schemas import PatientProfileResponse
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.constants import Role

router = APIRouter()


def _profile_response(profile: CaregiverProfile, user: User) -> CaregiverProfileResponse:
    return CaregiverProfileResponse(
        id=str(profile.id),
        name=user.name,
        **profile.model_dump(exclude={"id", "revision_id"}),
    )


@router.post(
    "/invite",
    response_model=InviteCodeResponse,
    summary="Generate a one-time caregiver invite code",
)
async def create_invite(
    current_user: User = Depends(deps.require_patient),
    service: CaregiverService = Depends(CaregiverService),
) -> InviteCodeResponse:
    try:
        invite = await service.create_invite(current_user)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return InviteCodeResponse(code=invite.code, expires_at=invite.expires_at)


@router.post(
    "/join",
    response_model=JoinResponse,
    summary="Redeem an invite code and request access",
)
async def join_with_code(
    payload: JoinRequest,
    current_user: User = Depends(deps.require_caregiver),
    service: CaregiverService = Depends(CaregiverService),
) -> JoinResponse:
    try:
        await service.redeem_invite(payload.code, current_user)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return JoinResponse()


@router.get(
    "/patients",
    response_model=List[PatientProfileResponse],
    summary="List patients that accepted this caregiver",
)
async def list_patients(
    current_user: User = Depends(deps.get_current_user),
    service: CaregiverService = Depends(CaregiverService),
) -> List[PatientProfileResponse]:
    if current_user.role != Role.CAREGIVER:
        return []
    profiles = await service.list_patients(current_user)
    return [PatientProfileResponse.from_document(profile) for profile in profiles]


@router.get(
    "/me",
    response_model=CaregiverProfileResponse,
    summary="Get the authenticated caregiver's profile",
)
async def read_own_profile(
    current_user: User = Depends(deps.require_caregiver),
    service: CaregiverService = Depends(CaregiverService),
) -> CaregiverProfileResponse:
    profile = await service.get_profile(current_user)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="NO_PROFILE")
    return _profile_response(profile, current_user)


@router.put(
    "/me",
    response_model=CaregiverProfileResponse,
    summary="Create or replace the authenticated caregiver's profile",
)
async def upsert_own_profile(
    payload: CaregiverProfileUpdate,
    current_user: User = Depends(deps.require_caregiver),
    service: CaregiverService = Depends(CaregiverService),
) -> CaregiverProfileResponse:
    profile = await service.upsert_profile(current_user, payload)
    return _profile_response(profile, current_user)

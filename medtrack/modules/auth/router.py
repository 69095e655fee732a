from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from medtrack.modules.auth.schemas import LoginRequest, TokenResponse
from medtrack.modules.auth.service import AuthService, EmailTakenError
from medtrack.modules.caregivers.schemas import CaregiverIdentityResponse
from medtrack.modules.users.models import User
from medtrack.modules.users.schemas import UserCreate, UserResponse
from medtrack.shared import deps

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a patient or caregiver",
)
async def register(
    user_in: UserCreate,
    auth_service: AuthService = Depends(AuthService),
) -> Any:
    """
    Create a new account and return a bearer token for it.

    Patients get an empty profile created alongside the account.
    """
    try:
        user = await auth_service.register(user_in)
    except EmailTakenError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return {"token": auth_service.create_access_token(user)}


@router.post("/login", response_model=TokenResponse, summary="Login to get a token")
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(AuthService),
) -> Any:
    user = await auth_service.authenticate(credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="INVALID_CREDENTIALS"
        )
    return {"token": auth_service.create_access_token(user)}


@router.get("/me", response_model=UserResponse, summary="Get current user info")
async def read_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    return UserResponse(
        id=str(current_user.id),
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
    )


@router.get(
    "/caregiver/me",
    response_model=CaregiverIdentityResponse,
    summary="Get current caregiver identity",
)
async def read_caregiver_me(
    current_user: User = Depends(deps.require_caregiver),
) -> Any:
    return CaregiverIdentityResponse(id=str(current_user.id), email=current_user.email)

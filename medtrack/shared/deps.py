from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from medtrack.core import security
from medtrack.core.config import settings
from medtrack.modules.users.models import User
from medtrack.shared.access import can_access_patient
from medtrack.shared.constants import PermissionLevel, Role
from medtrack.shared.documents import get_document

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False,
)


async def get_current_user(token: str | None = Depends(reusable_oauth2)) -> User:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = security.decode_access_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = await get_document(User, payload.get("sub"))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


class RoleChecker:
    """Dependency that admits only users holding one of ``allowed_roles``."""

    def __init__(self, allowed_roles: List[Role], detail: str = "FORBIDDEN") -> None:
        self.allowed_roles = allowed_roles
        self.detail = detail

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if user.role in self.allowed_roles:
            return user

        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self.detail)


require_patient = RoleChecker([Role.PATIENT], detail="ONLY_PATIENT")
require_caregiver = RoleChecker([Role.CAREGIVER], detail="ONLY_CAREGIVER")


async def require_patient_access(
    patient_profile_id: str,
    user: User,
    level: PermissionLevel = PermissionLevel.READ,
) -> None:
    """Translate a denied access decision into a 403 response."""
    if not await can_access_patient(patient_profile_id, user, level):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="NO_ACCESS")

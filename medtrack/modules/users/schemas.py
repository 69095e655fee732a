from typing import Optional

from pydantic import EmailStr, Field

from medtrack.shared.constants import Role
from medtrack.shared.schemas import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role
    name: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: EmailStr
    name: Optional[str] = None
    role: Role


class UserSummary(CamelModel):
    """Identity fields exposed to other users (e.g. a patient's caregivers)."""

    id: str
    email: EmailStr
    role: Role

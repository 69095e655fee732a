from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, HttpUrl

from medtrack.shared.constants import Role
from medtrack.shared.schemas import CamelModel


class InviteCodeResponse(CamelModel):
    code: str
    expires_at: datetime


class JoinRequest(CamelModel):
    code: str = Field(..., min_length=6)


class JoinResponse(CamelModel):
    ok: bool = True


class CaregiverIdentityResponse(CamelModel):
    id: str
    email: EmailStr
    role: Role = Role.CAREGIVER


class CaregiverProfileUpdate(CamelModel):
    """Full replacement of the profile; omitted fields are cleared."""

    name: Optional[str] = None
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    blood_type: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    relationship: Optional[str] = None
    photo_url: Optional[HttpUrl] = None


class CaregiverProfileResponse(CamelModel):
    id: str
    user_id: str
    name: Optional[str] = None
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    blood_type: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    relationship: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

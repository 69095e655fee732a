from datetime import datetime
from typing import Optional

from pydantic import HttpUrl

from medtrack.shared.constants import Role
from medtrack.shared.schemas import CamelModel, DocumentResponse


class PatientProfileUpdate(CamelModel):
    """Full replacement of the profile; omitted fields are cleared."""

    name: Optional[str] = None
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    blood_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    allergies: Optional[str] = None
    chronic_diseases: Optional[str] = None
    current_conditions: Optional[str] = None
    reactions: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_contact: Optional[str] = None
    hospital_reference: Optional[str] = None
    photo_url: Optional[HttpUrl] = None


class PatientProfileResponse(DocumentResponse):
    user_id: str
    name: Optional[str] = None
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    blood_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    allergies: Optional[str] = None
    chronic_diseases: Optional[str] = None
    current_conditions: Optional[str] = None
    reactions: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_contact: Optional[str] = None
    hospital_reference: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OwnPatientProfileResponse(PatientProfileResponse):
    role: Role = Role.PATIENT

from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel


class PatientProfile(Document):
    """Medical profile owned by exactly one PATIENT user."""

    user_id: str = Field(..., min_length=1)

    # Personal
    name: Optional[str] = None
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    blood_type: Optional[str] = None

    # Emergency contact
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    # Medical
    allergies: Optional[str] = None
    chronic_diseases: Optional[str] = None
    current_conditions: Optional[str] = None
    reactions: Optional[str] = None

    # Care team
    doctor_name: Optional[str] = None
    doctor_contact: Optional[str] = None
    hospital_reference: Optional[str] = None
    photo_url: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "patient_profiles"
        indexes = [IndexModel([("user_id", 1)], unique=True)]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel


class CaregiverProfile(Document):
    """Personal details of a CAREGIVER user (name lives on the User)."""

    user_id: str = Field(..., min_length=1)
    birth_date: Optional[datetime] = None
    gender: Optional[str] = None
    blood_type: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relation: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    relationship: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "caregiver_profiles"
        indexes = [IndexModel([("user_id", 1)], unique=True)]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class InviteCode(Document):
    """One-time code a patient hands to a caregiver."""

    patient_profile_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=6)
    expires_at: datetime
    used: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "invite_codes"
        indexes = [IndexModel([("code", 1)], unique=True)]

    def is_redeemable(self, now: datetime) -> bool:
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return not self.used and expires_at >= now

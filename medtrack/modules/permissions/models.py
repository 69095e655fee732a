from datetime import datetime, timezone

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel

from medtrack.shared.constants import PermissionLevel, PermissionStatus


class Permission(Document):
    """A caregiver's access grant to one patient profile."""

    patient_profile_id: str = Field(..., min_length=1)
    caregiver_id: str = Field(..., min_length=1)
    status: PermissionStatus = PermissionStatus.PENDING
    level: PermissionLevel = PermissionLevel.READ
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "permissions"
        indexes = [
            IndexModel([("patient_profile_id", 1), ("caregiver_id", 1)], unique=True),
            IndexModel([("caregiver_id", 1), ("status", 1)]),
        ]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

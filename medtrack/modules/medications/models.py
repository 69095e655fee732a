from datetime import datetime, timezone
from typing import Any, List, Optional

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel


class Medication(Document):
    patient_profile_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: str = Field(..., min_length=1)
    start_date: datetime
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "medications"
        indexes = [
            IndexModel([("patient_profile_id", 1), ("created_at", -1)]),
            IndexModel([("patient_profile_id", 1), ("start_date", 1)]),
        ]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class MedicationSchedule(Document):
    """When a medication should be taken; at most one per medication."""

    patient_profile_id: str = Field(..., min_length=1)
    medication_id: str = Field(..., min_length=1)
    frequency: str = "daily"
    times: List[str] = Field(default_factory=list)
    days_of_week: Optional[List[int]] = None
    custom_rule: Optional[Any] = None
    timezone: str = "UTC"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "medication_schedules"
        indexes = [IndexModel([("medication_id", 1)])]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

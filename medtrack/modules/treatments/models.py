from datetime import datetime, timezone
from typing import List, Optional

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel


class Treatment(Document):
    """A course of care; active while ``end_date`` is unset."""

    patient_profile_id: str = Field(..., min_length=1)
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    progress: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "treatments"
        indexes = [IndexModel([("patient_profile_id", 1), ("created_at", -1)])]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


class TreatmentReminder(Document):
    patient_profile_id: str = Field(..., min_length=1)
    treatment_id: str = Field(..., min_length=1)
    frequency: str
    times: List[str] = Field(default_factory=list)
    days_of_week: Optional[List[int]] = None
    timezone: str = "UTC"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "treatment_reminders"
        indexes = [IndexModel([("treatment_id", 1)])]


class TreatmentMedication(Document):
    """A medication prescribed as part of a treatment."""

    treatment_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "treatment_medications"
        indexes = [IndexModel([("treatment_id", 1)])]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

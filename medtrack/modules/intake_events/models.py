from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from beanie import Document
from pydantic import Field
from pymongo import IndexModel


class IntakeKind(str, Enum):
    MED = "MED"
    TRT = "TRT"


class IntakeAction(str, Enum):
    TAKEN = "TAKEN"
    SNOOZE = "SNOOZE"
    SKIPPED = "SKIPPED"


class IntakeEvent(Document):
    """A recorded reaction to a medication or treatment reminder. Never edited."""

    patient_profile_id: str = Field(..., min_length=1)
    kind: IntakeKind
    ref_id: str = Field(..., min_length=1)
    scheduled_for: datetime
    action: IntakeAction
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    meta: Optional[Any] = None

    class Settings:
        name = "intake_events"
        indexes = [IndexModel([("patient_profile_id", 1), ("at", -1)])]

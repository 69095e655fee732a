from datetime import datetime
from typing import Any, Optional

from medtrack.modules.intake_events.models import IntakeAction, IntakeKind
from medtrack.shared.schemas import CamelModel, DocumentResponse


class IntakeEventListQuery(CamelModel):
    patient_profile_id: str
    kind: Optional[IntakeKind] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class IntakeEventCreate(CamelModel):
    patient_profile_id: str
    kind: IntakeKind
    ref_id: str
    scheduled_for: datetime
    action: IntakeAction
    at: Optional[datetime] = None
    meta: Optional[Any] = None


class IntakeEventResponse(DocumentResponse):
    patient_profile_id: str
    kind: IntakeKind
    ref_id: str
    scheduled_for: datetime
    action: IntakeAction
    at: datetime
    meta: Optional[Any] = None

from datetime import datetime
from typing import Optional

from medtrack.modules.users.schemas import UserSummary
from medtrack.shared.constants import PermissionLevel, PermissionStatus
from medtrack.shared.schemas import CamelModel, DocumentResponse


class PermissionUpdate(CamelModel):
    level: Optional[PermissionLevel] = None
    status: Optional[PermissionStatus] = None


class PermissionResponse(DocumentResponse):
    patient_profile_id: str
    caregiver_id: str
    status: PermissionStatus
    level: PermissionLevel
    created_at: datetime
    updated_at: datetime


class PermissionWithCaregiverResponse(PermissionResponse):
    caregiver: Optional[UserSummary] = None

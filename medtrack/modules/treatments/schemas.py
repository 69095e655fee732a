from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from medtrack.shared.constants import SortOrder
from medtrack.shared.schemas import CamelModel, ClockTime, DocumentResponse, Weekday


class TreatmentSort(str, Enum):
    CREATED_AT = "createdAt"
    TITLE = "title"


class TreatmentListQuery(CamelModel):
    patient_profile_id: str
    active: Optional[bool] = None
    search: Optional[str] = None
    sort: TreatmentSort = TreatmentSort.CREATED_AT
    order: SortOrder = SortOrder.DESC


class ReminderCreate(CamelModel):
    frequency: str
    times: List[ClockTime]
    days_of_week: Optional[List[Weekday]] = None
    timezone: str


class TreatmentCreate(CamelModel):
    patient_profile_id: str
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    progress: Optional[str] = None
    reminders: Optional[List[ReminderCreate]] = None


class TreatmentUpdate(CamelModel):
    patient_profile_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    progress: Optional[str] = None


class TreatmentMedicationCreate(CamelModel):
    name: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = None
    notes: Optional[str] = None


class TreatmentMedicationUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = None
    notes: Optional[str] = None


class TreatmentReminderResponse(DocumentResponse):
    treatment_id: str
    frequency: str
    times: List[str]
    days_of_week: Optional[List[int]] = None
    timezone: str


class TreatmentResponse(DocumentResponse):
    patient_profile_id: str
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    progress: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    reminders: Optional[List[TreatmentReminderResponse]] = None


class TreatmentMedicationResponse(DocumentResponse):
    treatment_id: str
    name: str
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import Field

from medtrack.shared.constants import SortOrder
from medtrack.shared.schemas import CamelModel, ClockTime, DocumentResponse, Weekday


class MedicationSort(str, Enum):
    CREATED_AT = "createdAt"
    START_DATE = "startDate"
    NAME = "name"


class MedicationListQuery(CamelModel):
    patient_profile_id: str
    search: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    sort: MedicationSort = MedicationSort.CREATED_AT
    order: SortOrder = SortOrder.DESC


class ScheduleCreate(CamelModel):
    frequency: str
    times: List[ClockTime]
    days_of_week: Optional[List[Weekday]] = None
    custom_rule: Optional[Any] = None
    timezone: str


class ScheduleUpdate(CamelModel):
    frequency: Optional[str] = None
    times: Optional[List[ClockTime]] = None
    days_of_week: Optional[List[Weekday]] = None
    custom_rule: Optional[Any] = None
    timezone: Optional[str] = None


class MedicationCreate(CamelModel):
    patient_profile_id: str
    name: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: str = Field(..., min_length=1)
    start_date: datetime
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    schedule: Optional[ScheduleCreate] = None


class MedicationUpdate(CamelModel):
    patient_profile_id: str
    name: Optional[str] = Field(default=None, min_length=1)
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    schedule: Optional[ScheduleUpdate] = None


class MedicationScheduleResponse(DocumentResponse):
    medication_id: str
    frequency: str
    times: List[str]
    days_of_week: Optional[List[int]] = None
    custom_rule: Optional[Any] = None
    timezone: str


class MedicationResponse(DocumentResponse):
    patient_profile_id: str
    name: str
    dosage: Optional[str] = None
    type: Optional[str] = None
    frequency: str
    start_date: datetime
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    schedule: Optional[MedicationScheduleResponse] = None

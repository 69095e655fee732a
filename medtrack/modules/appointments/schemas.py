from datetime import datetime
from enum import Enum
from typing import Optional

from medtrack.modules.appointments.models import AppointmentStatus
from medtrack.shared.constants import SortOrder
from medtrack.shared.schemas import CamelModel, DocumentResponse


class AppointmentSort(str, Enum):
    DATE_TIME = "dateTime"
    CREATED_AT = "createdAt"


class AppointmentListQuery(CamelModel):
    patient_profile_id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    sort: AppointmentSort = AppointmentSort.DATE_TIME
    order: SortOrder = SortOrder.ASC


class AppointmentCreate(CamelModel):
    patient_profile_id: str
    title: str
    description: Optional[str] = None
    date_time: datetime
    location: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED


class AppointmentUpdate(CamelModel):
    patient_profile_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    date_time: Optional[datetime] = None
    location: Optional[str] = None
    status: Optional[AppointmentStatus] = None


class AppointmentResponse(DocumentResponse):
    patient_profile_id: str
    title: str
    description: Optional[str] = None
    date_time: datetime
    location: Optional[str] = None
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime

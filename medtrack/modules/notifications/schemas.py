from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import Field

from medtrack.modules.notifications.models import (
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from medtrack.shared.schemas import CamelModel, DocumentResponse


class NotificationListQuery(CamelModel):
    status: Optional[NotificationStatus] = None
    type: Optional[NotificationType] = None
    priority: Optional[NotificationPriority] = None
    search: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None


class NotificationCreate(CamelModel):
    user_id: str = Field(..., min_length=1)
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    metadata: Optional[Dict[str, Any]] = None
    scheduled_for: Optional[datetime] = None


class NotificationUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, min_length=1, max_length=1000)
    priority: Optional[NotificationPriority] = None
    metadata: Optional[Dict[str, Any]] = None
    scheduled_for: Optional[datetime] = None


class BulkReadRequest(CamelModel):
    ids: List[str] = Field(..., min_length=1)


class BulkReadResponse(CamelModel):
    processed: int
    total: int


class CleanupResponse(CamelModel):
    deleted_count: int
    cutoff_date: datetime


class StatusPercentages(CamelModel):
    unread: int = 0
    read: int = 0
    archived: int = 0


class NotificationStats(CamelModel):
    total: int
    unread: int
    read: int
    archived: int
    percentages: StatusPercentages
    by_type: Dict[str, int]
    by_priority: Dict[str, int]
    last_updated: datetime


class NotificationResponse(DocumentResponse):
    _excluded_fields: ClassVar[set[str]] = {"id", "revision_id", "priority_rank"}

    user_id: str
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    status: NotificationStatus
    metadata: Optional[Dict[str, Any]] = None
    scheduled_for: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

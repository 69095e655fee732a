from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from beanie import Document, Insert, Replace, Save, Update, before_event
from pydantic import Field
from pymongo import IndexModel


class NotificationType(str, Enum):
    MEDICATION_REMINDER = "MEDICATION_REMINDER"
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    TREATMENT_UPDATE = "TREATMENT_UPDATE"
    EMERGENCY_ALERT = "EMERGENCY_ALERT"
    SYSTEM_MESSAGE = "SYSTEM_MESSAGE"
    CAREGIVER_REQUEST = "CAREGIVER_REQUEST"
    PERMISSION_UPDATE = "PERMISSION_UPDATE"
    GENERAL_INFO = "GENERAL_INFO"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    NotificationPriority.LOW: 0,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.URGENT: 3,
}


class NotificationStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    ARCHIVED = "ARCHIVED"


class Notification(Document):
    user_id: str = Field(..., min_length=1)
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    # Mirrors ``priority`` so lists can sort by urgency in the database.
    priority_rank: int = 1
    status: NotificationStatus = NotificationStatus.UNREAD
    metadata: Optional[Dict[str, Any]] = None
    scheduled_for: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "notifications"
        indexes = [
            IndexModel([("user_id", 1), ("priority_rank", -1), ("created_at", -1)]),
            IndexModel([("user_id", 1), ("status", 1)]),
        ]

    @before_event(Insert, Replace, Save, Update)
    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

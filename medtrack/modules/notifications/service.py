import math
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import structlog
from beanie.operators import In, Or, RegEx

from medtrack.core.config import settings
from medtrack.modules.notifications.models import (
    Notification,
    NotificationStatus,
)
from medtrack.modules.notifications.schemas import (
    BulkReadResponse,
    CleanupResponse,
    NotificationCreate,
    NotificationListQuery,
    NotificationStats,
    NotificationUpdate,
    StatusPercentages,
)
from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.permissions.models import Permission
from medtrack.modules.users.models import User
from medtrack.shared.constants import PermissionStatus
from medtrack.shared.documents import get_document, to_object_id
from medtrack.shared.pagination import PageParams

log = structlog.get_logger()


def _percent(part: int, total: int) -> int:
    # Half-up rounding; an empty inbox reports 0 everywhere.
    return math.floor(part * 100 / max(total, 1) + 0.5)


class NotificationService:
    async def list(
        self, user: User, params: NotificationListQuery, page: PageParams
    ) -> Tuple[int, List[Notification]]:
        query = Notification.find(Notification.user_id == str(user.id))
        if params.status:
            query = query.find(Notification.status == params.status)
        if params.type:
            query = query.find(Notification.type == params.type)
        if params.priority:
            query = query.find(Notification.priority == params.priority)
        if params.search:
            pattern = re.escape(params.search)
            query = query.find(
                Or(
                    RegEx(Notification.title, pattern, "i"),
                    RegEx(Notification.message, pattern, "i"),
                )
            )
        if params.from_date:
            query = query.find(Notification.created_at >= params.from_date)
        if params.to_date:
            query = query.find(Notification.created_at <= params.to_date)

        total = await query.count()
        items = (
            await query.sort("-priority_rank", "-created_at")
            .skip(page.skip)
            .limit(page.take)
            .to_list()
        )
        return total, items

    async def _ensure_can_notify(self, sender: User, recipient: User) -> None:
        """A caregiver may notify a patient only through an accepted permission."""
        if str(sender.id) == str(recipient.id):
            return
        profile = await PatientProfile.find_one(
            PatientProfile.user_id == str(recipient.id)
        )
        permission = None
        if profile:
            permission = await Permission.find_one(
                Permission.patient_profile_id == str(profile.id),
                Permission.caregiver_id == str(sender.id),
            )
        if not permission or permission.status != PermissionStatus.ACCEPTED:
            raise PermissionError("NO_PERMISSION")

    async def create(self, sender: User, payload: NotificationCreate) -> Notification:
        recipient = await get_document(User, payload.user_id)
        if not recipient:
            raise LookupError("USER_NOT_FOUND")
        await self._ensure_can_notify(sender, recipient)

        notification = Notification(
            **payload.model_dump(),
            priority_rank=payload.priority.rank,
        )
        await notification.insert()
        log.info(
            "notifications.created",
            notification_id=str(notification.id),
            user_id=payload.user_id,
            sender_id=str(sender.id),
            type=payload.type.value,
        )
        return notification

    async def get_owned(self, notification_id: str, user: User) -> Notification:
        notification = await get_document(Notification, notification_id)
        if not notification:
            raise LookupError("NOTIFICATION_NOT_FOUND")
        if notification.user_id != str(user.id):
            raise PermissionError("NO_PERMISSION")
        return notification

    async def mark_read(self, notification_id: str, user: User) -> Notification:
        notification = await self.get_owned(notification_id, user)
        if notification.status == NotificationStatus.READ:
            return notification
        notification.status = NotificationStatus.READ
        notification.read_at = datetime.now(timezone.utc)
        await notification.save()
        log.info("notifications.read", notification_id=notification_id)
        return notification

    async def archive(self, notification_id: str, user: User) -> Notification:
        notification = await self.get_owned(notification_id, user)
        if notification.status == NotificationStatus.ARCHIVED:
            return notification
        notification.status = NotificationStatus.ARCHIVED
        await notification.save()
        log.info("notifications.archived", notification_id=notification_id)
        return notification

    async def update(
        self, notification_id: str, user: User, payload: NotificationUpdate
    ) -> Notification:
        notification = await self.get_owned(notification_id, user)
        if notification.status == NotificationStatus.ARCHIVED:
            raise ValueError("CANNOT_UPDATE_ARCHIVED")

        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            # title, message and priority cannot be cleared.
            if value is None and field in {"title", "message", "priority"}:
                continue
            setattr(notification, field, value)
        notification.priority_rank = notification.priority.rank
        await notification.save()
        log.info("notifications.updated", notification_id=notification_id)
        return notification

    async def delete(self, notification_id: str, user: User) -> None:
        notification = await self.get_owned(notification_id, user)
        await notification.delete()
        log.info("notifications.deleted", notification_id=notification_id)

    async def stats(self, user: User) -> NotificationStats:
        notifications = await Notification.find(
            Notification.user_id == str(user.id)
        ).to_list()
        total = len(notifications)
        by_status = Counter(n.status for n in notifications)
        unread = by_status[NotificationStatus.UNREAD]
        read = by_status[NotificationStatus.READ]
        archived = by_status[NotificationStatus.ARCHIVED]
        return NotificationStats(
            total=total,
            unread=unread,
            read=read,
            archived=archived,
            percentages=StatusPercentages(
                unread=_percent(unread, total),
                read=_percent(read, total),
                archived=_percent(archived, total),
            ),
            by_type=dict(Counter(n.type.value for n in notifications)),
            by_priority=dict(Counter(n.priority.value for n in notifications)),
            last_updated=datetime.now(timezone.utc),
        )

    async def mark_many_read(self, ids: List[str], user: User) -> BulkReadResponse:
        object_ids = [oid for oid in map(to_object_id, ids) if oid is not None]
        notifications = []
        if object_ids:
            notifications = await Notification.find(
                In(Notification.id, object_ids),
                Notification.user_id == str(user.id),
            ).to_list()
        if not notifications:
            raise LookupError("NO_NOTIFICATIONS_FOUND")

        now = datetime.now(timezone.utc)
        unread = [n for n in notifications if n.status == NotificationStatus.UNREAD]
        for notification in unread:
            notification.status = NotificationStatus.READ
            notification.read_at = now
            await notification.save()

        log.info(
            "notifications.bulk_read",
            user_id=str(user.id),
            processed=len(unread),
            total=len(notifications),
        )
        return BulkReadResponse(processed=len(unread), total=len(notifications))

    async def cleanup_archived(self, user: User) -> CleanupResponse:
        cutoff = datetime.now(timezone.utc) - timedelta(
            days=settings.NOTIFICATION_RETENTION_DAYS
        )
        result = await Notification.find(
            Notification.user_id == str(user.id),
            Notification.status == NotificationStatus.ARCHIVED,
            Notification.updated_at < cutoff,
        ).delete()
        deleted = result.deleted_count if result else 0
        log.info("notifications.cleanup", user_id=str(user.id), deleted=deleted)
        return CleanupResponse(deleted_count=deleted, cutoff_date=cutoff)

from datetime import datetime
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from medtrack.modules.notifications.models import (
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from medtrack.modules.notifications.schemas import (
    BulkReadRequest,
    BulkReadResponse,
    CleanupResponse,
    NotificationCreate,
    NotificationListQuery,
    NotificationResponse,
    NotificationStats,
    NotificationUpdate,
)
from medtrack.modules.notifications.service import NotificationService
from medtrack.modules.users.models import User
from medtrack.shared import deps
from medtrack.shared.pagination import Page, PageParams, build_meta, pagination_params

router = APIRouter()


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, LookupError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc


async def get_notification_query_params(
    status_filter: NotificationStatus | None = Query(None, alias="status"),
    type_filter: NotificationType | None = Query(None, alias="type"),
    priority: NotificationPriority | None = Query(None),
    search: str | None = Query(None, description="Matches title or message"),
    from_date: datetime | None = Query(None, alias="fromDate"),
    to_date: datetime | None = Query(None, alias="toDate"),
) -> NotificationListQuery:
    return NotificationListQuery(
        status=status_filter,
        type=type_filter,
        priority=priority,
        search=search,
        from_date=from_date,
        to_date=to_date,
    )


@router.get("/", response_model=Page[NotificationResponse], summary="List own notifications")
async def list_notifications(
    params: NotificationListQuery = Depends(get_notification_query_params),
    page: PageParams = Depends(pagination_params),
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> Page[NotificationResponse]:
    total, items = await service.list(current_user, params, page)
    return Page[NotificationResponse](
        items=[NotificationResponse.from_document(item) for item in items],
        meta=build_meta(total, page.page, page.page_size),
    )


@router.post(
    "/",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification for yourself or a patient you care for",
)
async def create_notification(
    payload: NotificationCreate,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationResponse:
    try:
        notification = await service.create(current_user, payload)
    except (LookupError, PermissionError) as exc:
        _raise_http(exc)
    return NotificationResponse.from_document(notification)


@router.get("/stats", response_model=NotificationStats, summary="Notification statistics")
async def notification_stats(
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationStats:
    return await service.stats(current_user)


@router.patch("/bulk/read", response_model=BulkReadResponse, summary="Mark several as read")
async def bulk_mark_read(
    payload: BulkReadRequest,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> BulkReadResponse:
    try:
        return await service.mark_many_read(payload.ids, current_user)
    except LookupError as exc:
        _raise_http(exc)


@router.delete(
    "/cleanup/old",
    response_model=CleanupResponse,
    summary="Delete archived notifications past the retention window",
)
async def cleanup_old_notifications(
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> CleanupResponse:
    return await service.cleanup_archived(current_user)


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationResponse:
    try:
        notification = await service.get_owned(notification_id, current_user)
    except (LookupError, PermissionError) as exc:
        _raise_http(exc)
    return NotificationResponse.from_document(notification)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationResponse:
    try:
        notification = await service.mark_read(notification_id, current_user)
    except (LookupError, PermissionError) as exc:
        _raise_http(exc)
    return NotificationResponse.from_document(notification)


@router.patch("/{notification_id}/archive", response_model=NotificationResponse)
async def archive_notification(
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationResponse:
    try:
        notification = await service.archive(notification_id, current_user)
    except (LookupError, PermissionError) as exc:
        _raise_http(exc)
    return NotificationResponse.from_document(notification)


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    notification_id: str,
    payload: NotificationUpdate,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> NotificationResponse:
    try:
        notification = await service.update(notification_id, current_user, payload)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_http(exc)
    return NotificationResponse.from_document(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
    service: NotificationService = Depends(NotificationService),
) -> Response:
    try:
        await service.delete(notification_id, current_user)
    except (LookupError, PermissionError) as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

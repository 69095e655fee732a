from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import HttpUrl

from medtrack.modules.subscriptions.schemas import (
    PushSubscriptionCreate,
    PushSubscriptionResponse,
)
from medtrack.modules.subscriptions.service import PushSubscriptionService
from medtrack.modules.users.models import User
from medtrack.shared import deps

router = APIRouter()


@router.post("/subscribe", response_model=PushSubscriptionResponse)
async def subscribe(
    payload: PushSubscriptionCreate,
    current_user: User = Depends(deps.get_current_user),
    service: PushSubscriptionService = Depends(PushSubscriptionService),
) -> PushSubscriptionResponse:
    subscription = await service.subscribe(str(current_user.id), payload)
    return PushSubscriptionResponse.from_document(subscription)


@router.delete("/subscribe", status_code=status.HTTP_204_NO_CONTENT)
async def unsubscribe(
    endpoint: HttpUrl = Query(...),
    current_user: User = Depends(deps.get_current_user),
    service: PushSubscriptionService = Depends(PushSubscriptionService),
) -> Response:
    await service.unsubscribe(str(endpoint))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

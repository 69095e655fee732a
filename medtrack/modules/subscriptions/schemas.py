from datetime import datetime

from pydantic import HttpUrl

from medtrack.shared.schemas import CamelModel, DocumentResponse


class PushSubscriptionCreate(CamelModel):
    endpoint: HttpUrl
    p256dh: str
    auth: str


class PushSubscriptionResponse(DocumentResponse):
    user_id: str
    endpoint: str
    p256dh: str
    auth: str
    created_at: datetime

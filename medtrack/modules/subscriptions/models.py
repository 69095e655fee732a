from datetime import datetime, timezone

from beanie import Document, Indexed
from pydantic import Field


class PushSubscription(Document):
    """Web-push endpoint registered by a browser for a user."""

    user_id: str = Field(..., min_length=1)
    endpoint: Indexed(str, unique=True)
    p256dh: str
    auth: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "push_subscriptions"

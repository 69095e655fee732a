from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Indexed, Insert, Replace, Save, Update, before_event
from pydantic import EmailStr, Field

from medtrack.shared.constants import Role


class User(Document):
    email: Indexed(EmailStr, unique=True)  # type: ignore
    hashed_password: str
    role: Role
    name: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @before_event(Insert, Replace, Save, Update)
    def update_updated_at(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    class Settings:
        name = "users"

from typing import Optional

import structlog
from pymongo.errors import DuplicateKeyError

from medtrack.core import security
from medtrack.modules.patients.service import PatientProfileService
from medtrack.modules.users.models import User
from medtrack.modules.users.schemas import UserCreate
from medtrack.modules.users.service import UserService
from medtrack.shared.constants import Role

log = structlog.get_logger()


class EmailTakenError(ValueError):
    pass


class AuthService:
    def __init__(self) -> None:
        self.user_service = UserService()
        self.patient_service = PatientProfileService()

    async def register(self, user_in: UserCreate) -> User:
        if await self.user_service.get_by_email(user_in.email):
            log.warning("auth.register_rejected", email=user_in.email, reason="email_taken")
            raise EmailTakenError("EMAIL_TAKEN")

        try:
            user = await self.user_service.create(user_in)
        except DuplicateKeyError as exc:
            # A concurrent registration claimed the email first.
            log.warning("auth.register_rejected", email=user_in.email, reason="email_taken")
            raise EmailTakenError("EMAIL_TAKEN") from exc
        if user.role == Role.PATIENT:
            await self.patient_service.create_empty(user)
        log.info("auth.registered", user_id=str(user.id), role=user.role.value)
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        user = await self.user_service.get_by_email(email)

        if not user:
            log.warning("auth.login_failed", email=email, reason="user_not_found")
            return None

        if not security.verify_password(password, user.hashed_password):
            log.warning("auth.login_failed", email=email, reason="bad_password")
            return None

        log.info("auth.login_success", email=email, user_id=str(user.id))
        return user

    def create_access_token(self, user: User) -> str:
        return security.create_access_token(user.id, role=user.role.value)

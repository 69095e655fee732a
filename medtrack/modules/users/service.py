import structlog

from medtrack.core import security
from medtrack.modules.users.models import User
from medtrack.modules.users.schemas import UserCreate
from medtrack.shared.documents import get_document

log = structlog.get_logger()


class UserService:
    async def get(self, user_id: str) -> User | None:
        return await get_document(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        user: User | None = await User.find_one(User.email == email)
        return user

    async def create(self, user_in: UserCreate) -> User:
        log.info("users.creating", email=user_in.email, role=user_in.role.value)

        user = User(
            email=user_in.email,
            hashed_password=security.get_password_hash(user_in.password),
            role=user_in.role,
            name=user_in.name,
        )
        await user.insert()
        return user

from medtrack.core import security
from medtrack.modules.users.models import User


def auth_headers(user: User) -> dict[str, str]:
    token = security.create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}

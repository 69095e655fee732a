from datetime import datetime, timedelta, timezone
from typing import Any, Union

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt

from medtrack.core.config import settings

# Use argon2id directly to avoid stdlib crypt() deprecation warnings.
password_hasher = PasswordHasher()

ALGORITHM = "HS256"
# Local fallback only; production MUST load SECRET_KEY from env.
SECRET_KEY = settings.SECRET_KEY or (
    "09d25e094faa6ca2556c818166b7a9563b93f7099f6f0f4caa6cf63b88e8d3e7"
)


def create_access_token(
    subject: Union[str, Any],
    role: str | None = None,
    expires_delta: Union[timedelta, None] = None,
) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode: dict[str, Any] = {"exp": expire, "sub": str(subject)}
    if role is not None:
        to_encode["role"] = role
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token. Raises ``jose.JWTError`` when invalid."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify passwords hashed with argon2id.
    """
    try:
        return password_hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def get_password_hash(password: str) -> str:
    return password_hasher.hash(password)

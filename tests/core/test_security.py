from datetime import timedelta

import pytest
from jose import JWTError, jwt

from medtrack.core import security


def test_access_token_round_trip_carries_role():
    token = security.create_access_token("abc123", role="CAREGIVER")
    payload = security.decode_access_token(token)

    assert payload["sub"] == "abc123"
    assert payload["role"] == "CAREGIVER"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = security.create_access_token("abc123", expires_delta=timedelta(seconds=-5))

    with pytest.raises(JWTError):
        security.decode_access_token(token)


def test_token_signed_with_other_key_is_rejected():
    forged = jwt.encode({"sub": "abc123"}, "not-the-secret", algorithm=security.ALGORITHM)

    with pytest.raises(JWTError):
        security.decode_access_token(forged)

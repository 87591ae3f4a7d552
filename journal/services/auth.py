"""Bearer-token utilities.

Identity lives with an external provider; this service only verifies the
HS256 tokens it shares a secret with and reads the subject as the user id.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from journal.config import settings


def create_access_token(subject: str, expire_minutes: int | None = None) -> str:
    """Issue a token locally (development and tests)."""
    minutes = expire_minutes if expire_minutes is not None else settings.jwt_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Decode JWT and return the subject (user id). Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload.get("sub")
    except JWTError:
        return None

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from cubequality.core.config import get_settings

OPERATOR_SUBJECT = "operator"


def verify_admin_password(password: str) -> bool:
    settings = get_settings()
    if not settings.admin_password:
        return False
    return secrets.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))


def create_access_token(subject: str = OPERATOR_SUBJECT, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc

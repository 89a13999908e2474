"""Security utilities for admin authentication.

Provides:
- Reserved identity detection (names only the blog owner may use)
- Admin password comparison in constant time
- JWT creation and validation for the admin cookie
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.config.settings import get_settings


def is_reserved_identity(nickname: str, email: str = "") -> bool:
    """Check whether a nickname or email belongs to the admin.

    Comparison is case-insensitive and ignores surrounding whitespace.
    """
    settings = get_settings()
    reserved = {name.strip().lower() for name in settings.reserved_identities}
    reserved.update({settings.admin_nickname.lower(), settings.admin_email.lower()})
    return nickname.strip().lower() in reserved or email.strip().lower() in reserved


def verify_admin_password(password: str, expected: str) -> bool:
    """Compare passwords without leaking timing information."""
    return secrets.compare_digest(password.encode(), expected.encode())


def create_admin_token(
    data: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT for the admin cookie.

    Token payload includes:
        - The configured admin identity (nickname, email, website, avatar)
        - isAdmin: always True
        - exp / iat timestamps
    """
    settings = get_settings()

    to_encode = {
        "nickname": settings.admin_nickname,
        "email": settings.admin_email,
        "website": settings.admin_website,
        "avatar": settings.admin_avatar,
        "isAdmin": True,
        **(data or {}),
    }
    now = datetime.now(UTC)
    to_encode.update(
        {
            "exp": now
            + (expires_delta or timedelta(seconds=settings.auth_cookie_max_age_seconds)),
            "iat": now,
        }
    )

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_admin_token(token: str) -> dict[str, Any]:
    """Decode and validate an admin token.

    Raises:
        JWTError: If token is invalid, expired, or not an admin token
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
    )

    if not payload.get("isAdmin"):
        msg = "Token does not carry admin rights"
        raise JWTError(msg)

    return payload

"""FastAPI dependencies for admin authentication.

The admin session is a JWT stored in an HttpOnly cookie. There are no
other accounts: guests identify themselves per comment.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from src.auth.schemas import AdminIdentity
from src.auth.security import decode_admin_token
from src.config.settings import get_settings
from src.core.logging import get_logger


logger = get_logger(__name__)


def get_token_from_cookie(request: Request) -> str | None:
    """Extract the admin token from the auth cookie."""
    settings = get_settings()
    return request.cookies.get(settings.auth_cookie_name)


async def get_optional_admin(
    token: Annotated[str | None, Depends(get_token_from_cookie)],
) -> AdminIdentity | None:
    """Get the admin identity if the cookie is valid, None otherwise."""
    if not token:
        return None

    try:
        payload = decode_admin_token(token)
    except JWTError as e:
        logger.debug("admin_token_rejected", error=str(e))
        return None

    return AdminIdentity(
        nickname=payload.get("nickname", ""),
        email=payload.get("email", ""),
        website=payload.get("website"),
        avatar=payload.get("avatar"),
    )


async def get_admin_user(
    admin: Annotated[AdminIdentity | None, Depends(get_optional_admin)],
) -> AdminIdentity:
    """Require a valid admin cookie.

    Raises:
        HTTPException(403): If the cookie is missing, invalid, or expired
    """
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized",
        )
    return admin


# Type aliases for cleaner route signatures
AdminUser = Annotated[AdminIdentity, Depends(get_admin_user)]
OptionalAdmin = Annotated[AdminIdentity | None, Depends(get_optional_admin)]

"""Admin authentication endpoints.

Routes:
- POST /api/login: identity check, admin cookie for reserved identities
- POST /api/logout: clear the admin cookie
- GET /api/me: login state of the caller
"""

from fastapi import APIRouter, HTTPException, Response, status

from src.config.settings import get_settings
from src.core.logging import get_logger

from .dependencies import OptionalAdmin
from .schemas import LoginRequest, LoginResponse, LogoutResponse, MeResponse
from .security import create_admin_token, is_reserved_identity, verify_admin_password


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse, summary="Check commenter identity")
async def login(data: LoginRequest, response: Response) -> LoginResponse:
    """Check whether a commenter identity needs the admin password.

    Ordinary identities pass without a password and get no cookie.
    Reserved identities must present the admin password; on success an
    HttpOnly JWT cookie is set.
    """
    settings = get_settings()

    if not is_reserved_identity(data.nickname, data.email):
        return LoginResponse(success=True, is_admin=False)

    if not settings.admin_password:
        logger.error("admin_password_not_configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin password is not configured",
        )

    if not data.password or not verify_admin_password(
        data.password, settings.admin_password
    ):
        logger.warning("admin_login_failed", nickname=data.nickname)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
        )

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_admin_token(),
        httponly=True,
        secure=settings.is_production,
        samesite=settings.auth_cookie_samesite,
        max_age=settings.auth_cookie_max_age_seconds,
        path="/",
    )
    logger.info("admin_logged_in")
    return LoginResponse(success=True, is_admin=True, message="Verified")


@router.post("/logout", response_model=LogoutResponse, summary="Clear admin session")
async def logout(response: Response) -> LogoutResponse:
    settings = get_settings()
    response.delete_cookie(key=settings.auth_cookie_name, path="/")
    return LogoutResponse()


@router.get("/me", response_model=MeResponse, summary="Current login state")
async def me(admin: OptionalAdmin) -> MeResponse:
    if admin is None:
        return MeResponse(is_logged_in=False, is_admin=False)
    return MeResponse(
        is_logged_in=True,
        is_admin=True,
        nickname=admin.nickname,
        email=admin.email,
        website=admin.website,
        avatar=admin.avatar,
    )

"""FastAPI dependencies for wiring and authentication."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tubeauth.api.errors import raise_for_result
from tubeauth.config import Settings
from tubeauth.models.user import PublicUser
from tubeauth.services.auth_service import AuthService

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """AuthService built at startup and kept on app.state."""
    return request.app.state.auth_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """Resolve the caller from the access token cookie or Bearer header.

    Returns:
        Authenticated PublicUser

    Raises:
        AuthHTTPError: UNAUTHORIZED when no token is sent, or the token
            verification failure
    """
    token = request.cookies.get(ACCESS_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials

    user = raise_for_result(await auth_service.authenticate(token))
    request.state.user_id = str(user.id)
    return user

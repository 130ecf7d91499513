"""User authentication endpoints."""

import shutil
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import structlog
from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile, status

from tubeauth.api.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    get_app_settings,
    get_auth_service,
    get_current_user,
)
from tubeauth.api.errors import raise_for_result
from tubeauth.config import Settings
from tubeauth.models.auth import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterInput,
    TokenPair,
    TokenResponse,
)
from tubeauth.models.user import PublicUser
from tubeauth.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _spool_upload(upload: Optional[UploadFile], temp_dir: str) -> Optional[str]:
    """Copy an uploaded file to the temp dir and return its path."""
    if upload is None or not upload.filename:
        return None
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"{uuid4().hex}-{Path(upload.filename).name}"
    with target.open("wb") as fh:
        shutil.copyfileobj(upload.file, fh)
    return str(target)


def _set_token_cookies(response: Response, tokens: TokenPair, settings: Settings) -> None:
    options = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }
    response.set_cookie(
        ACCESS_COOKIE,
        tokens.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        tokens.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        **options,
    )


def _clear_token_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    full_name: str = Form("", alias="fullName"),
    email: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[PublicUser]:
    """Register a new user with a mandatory avatar and optional cover image.

    Returns:
        ApiResponse wrapping the public user view

    Raises:
        AuthHTTPError 400: Missing field, missing avatar or failed upload
        AuthHTTPError 409: Username or email already taken
    """
    spooled: List[str] = []
    try:
        avatar_path = _spool_upload(avatar, settings.upload_temp_dir)
        cover_path = _spool_upload(cover_image, settings.upload_temp_dir)
        spooled = [p for p in (avatar_path, cover_path) if p]

        result = await auth_service.register(
            RegisterInput(
                full_name=full_name,
                email=email,
                username=username,
                password=password,
                avatar_path=avatar_path,
                cover_image_path=cover_path,
            )
        )
    finally:
        for path in spooled:
            Path(path).unlink(missing_ok=True)

    user = raise_for_result(result)
    return ApiResponse[PublicUser](
        status_code=status.HTTP_201_CREATED,
        data=user,
        message="User registered successfully",
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[LoginResponse]:
    """Login with username or email and password.

    Tokens are set as HttpOnly cookies and mirrored in the body.

    Raises:
        AuthHTTPError 400: Neither username nor email given
        AuthHTTPError 404: No such user
        AuthHTTPError 401: Wrong password
    """
    logged_in = raise_for_result(await auth_service.login(request))
    _set_token_cookies(response, logged_in.tokens, settings)

    return ApiResponse[LoginResponse](
        status_code=status.HTTP_200_OK,
        data=LoginResponse(
            access_token=logged_in.tokens.access_token,
            refresh_token=logged_in.tokens.refresh_token,
            expires_in=auth_service.token_issuer.access_token_lifetime_seconds,
            user=logged_in.user,
        ),
        message="User logged in successfully",
    )


@router.post("/logout")
async def logout(
    response: Response,
    current_user: PublicUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[dict]:
    """End the caller's session and clear the token cookies."""
    raise_for_result(await auth_service.logout(current_user.id))
    _clear_token_cookies(response, settings)
    return ApiResponse[dict](status_code=status.HTTP_200_OK, data={}, message="User logged out")


@router.post("/refresh-token")
async def refresh_token(
    response: Response,
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[TokenResponse]:
    """Exchange a refresh token for a new pair (rotation).

    The refresh token is read from the cookie first, then from the body.

    Raises:
        AuthHTTPError 401: Missing, invalid, expired or already-used token
    """
    presented = refresh_cookie or (body.refresh_token if body else None)
    tokens = raise_for_result(await auth_service.refresh(presented))
    _set_token_cookies(response, tokens, settings)

    return ApiResponse[TokenResponse](
        status_code=status.HTTP_200_OK,
        data=TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=auth_service.token_issuer.access_token_lifetime_seconds,
        ),
        message="Access token refreshed",
    )


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: PublicUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[dict]:
    """Change the caller's password after checking the old one."""
    raise_for_result(
        await auth_service.change_password(
            current_user.id, request.old_password, request.new_password
        )
    )
    return ApiResponse[dict](
        status_code=status.HTTP_200_OK, data={}, message="Password changed successfully"
    )


@router.get("/current-user")
async def current_user(
    user: PublicUser = Depends(get_current_user),
) -> ApiResponse[PublicUser]:
    return ApiResponse[PublicUser](
        status_code=status.HTTP_200_OK, data=user, message="Current user fetched"
    )

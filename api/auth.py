"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from auth.config import AuthConfig
from auth.constants import LOGGED_OUT, GeneralErrorDetails
from auth.dependencies import (
    clear_refresh_cookie,
    get_auth_service,
    get_config,
    get_current_user_id,
    set_refresh_cookie,
)
from auth.exceptions import NotFoundError
from auth.schemas import (
    AccessTokenResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
)
from auth.services.auth_service import AuthService

router = APIRouter()


def _refresh_cookie(request: Request, config: AuthConfig) -> str | None:
    return request.cookies.get(config.REFRESH_COOKIE_NAME)


@router.post("/register", response_model=AccessTokenResponse, status_code=status.HTTP_200_OK)
async def register(
    payload: RegisterRequest,
    response: Response,
    config: AuthConfig = Depends(get_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccessTokenResponse:
    tokens = await auth_service.register(payload.email, payload.password)
    set_refresh_cookie(response, tokens.refresh_token, config)
    return AccessTokenResponse(access_token=tokens.access_token)


@router.post("/login", response_model=AccessTokenResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    response: Response,
    config: AuthConfig = Depends(get_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccessTokenResponse:
    tokens = await auth_service.login(payload.email, payload.password)
    set_refresh_cookie(response, tokens.refresh_token, config)
    return AccessTokenResponse(access_token=tokens.access_token)


@router.post("/refresh", response_model=AccessTokenResponse, status_code=status.HTTP_200_OK)
async def refresh(
    request: Request,
    response: Response,
    config: AuthConfig = Depends(get_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccessTokenResponse:
    tokens = await auth_service.refresh(_refresh_cookie(request, config))
    set_refresh_cookie(response, tokens.refresh_token, config)
    return AccessTokenResponse(access_token=tokens.access_token)


@router.post("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def logout(
    request: Request,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    config: AuthConfig = Depends(get_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.logout(user_id, _refresh_cookie(request, config))
    clear_refresh_cookie(response, config)
    return MessageResponse(message=LOGGED_OUT)


@router.get("/me", response_model=MeResponse, status_code=status.HTTP_200_OK)
async def me(
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> MeResponse:
    user = await auth_service.get_user(user_id)
    if not user:
        raise NotFoundError(GeneralErrorDetails.NOT_FOUND)
    return MeResponse(id=str(user["id"]), email=user["email"])

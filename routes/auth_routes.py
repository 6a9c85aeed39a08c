"""
Identity routes.

POST /login            — email/password → bearer JWT
POST /register         — create an account
POST /change-password  — authenticated
GET  /me               — authenticated profile
PUT  /me               — update profile fields
"""

from fastapi import APIRouter, Depends, Request

from config import AppSettings
from dependencies import get_auth_service, get_settings, require_user
from infrastructure.rate_limit import Limits, limiter
from schemas.dto.requests.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
)
from schemas.dto.responses.auth import LoginResponse, UserProfileResponse
from schemas.dto.responses.common import MessageResponse, ProblemResponse
from services.auth_service import AuthService
from services.scope import RequestContext

router = APIRouter(
    tags=["auth"],
    responses={
        400: {"model": ProblemResponse},
        401: {"model": ProblemResponse},
        429: {"model": ProblemResponse},
    },
)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(Limits.LOGIN)
async def login(
    request: Request,
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    settings: AppSettings = Depends(get_settings),
) -> LoginResponse:
    access_token = await auth.login(body.email, body.password)
    return LoginResponse(
        access_token=access_token,
        expires_in=settings.jwt.access_token_ttl_seconds,
    )


@router.post("/register", response_model=UserProfileResponse, status_code=201)
@limiter.limit(Limits.REGISTER)
async def register(
    request: Request,
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> UserProfileResponse:
    user = await auth.register(
        body.email,
        body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        profile_image_url=body.profile_image_url,
    )
    return UserProfileResponse.from_user(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    ctx: RequestContext = Depends(require_user),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.change_password(
        ctx.user_id, body.password, body.new_password, body.repeat_password
    )
    return MessageResponse(success=True, message="Password changed")


@router.get("/me", response_model=UserProfileResponse)
async def get_me(
    ctx: RequestContext = Depends(require_user),
    auth: AuthService = Depends(get_auth_service),
) -> UserProfileResponse:
    return UserProfileResponse.from_user(await auth.get_user(ctx.user_id))


@router.put("/me", response_model=UserProfileResponse)
async def update_me(
    body: UpdateProfileRequest,
    ctx: RequestContext = Depends(require_user),
    auth: AuthService = Depends(get_auth_service),
) -> UserProfileResponse:
    user = await auth.update_profile(ctx.user_id, body.model_dump(exclude_unset=True))
    return UserProfileResponse.from_user(user)

"""
NITC Blogs — Auth API routes (signup, confirmation, login, password reset)
"""
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response

from nitc_blogs.core.clock import utcnow
from nitc_blogs.core.config import Settings
from nitc_blogs.middleware.auth import AuthContext, get_auth_service, protect
from nitc_blogs.schemas.auth import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SignupRequest,
    UpdatePasswordRequest,
    UserData,
    UserPublic,
)
from nitc_blogs.schemas.common import MessageResponse
from nitc_blogs.services.auth import AuthService, LoginResult

router = APIRouter(prefix="/api/v1/users", tags=["auth"])

SESSION_COOKIE = "jwt"


def send_session(result: LoginResult, response: Response, settings: Settings) -> LoginResponse:
    """Deliver the session token in the body and as an http-only cookie."""
    response.set_cookie(
        SESSION_COOKIE,
        result.token,
        expires=utcnow() + timedelta(days=settings.JWT_COOKIE_EXPIRE_DAYS),
        httponly=True,
        secure=settings.is_production,
    )
    return LoginResponse(token=result.token, data=UserData(user=UserPublic.model_validate(result.user)))


@router.post("/signup", response_model=MessageResponse)
async def signup(payload: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.signup(payload.name, payload.email, payload.password, payload.password_confirm)
    return MessageResponse(message="Signup token sent to the email!")


@router.post("/resendSignupToken", response_model=MessageResponse)
async def resend_signup_token(payload: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.resend_signup_token(payload.email)
    return MessageResponse(message="Signup token sent to the email!")


@router.post("/confirmSignup/{token}", response_model=MessageResponse)
async def confirm_signup(token: str, auth: AuthService = Depends(get_auth_service)):
    await auth.confirm_signup(token)
    return MessageResponse(
        message="Your account has been successfully created! Please login to continue"
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    result = await auth.login(payload.email, payload.password)
    return send_session(result, response, request.app.state.settings)


@router.post("/forgotPassword", response_model=MessageResponse)
async def forgot_password(payload: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.forgot_password(payload.email)
    return MessageResponse(message="Password reset token sent to email!")


@router.patch("/resetPassword/{token}", response_model=MessageResponse)
async def reset_password(
    token: str, payload: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
):
    await auth.reset_password(token, payload.password, payload.password_confirm)
    return MessageResponse(message="Password changed successfully. Please login to continue")


@router.patch("/updateMyPassword", response_model=LoginResponse)
async def update_my_password(
    payload: UpdatePasswordRequest,
    request: Request,
    response: Response,
    ctx: AuthContext = Depends(protect),
    auth: AuthService = Depends(get_auth_service),
):
    result = await auth.update_password(
        ctx.user, payload.password_current, payload.password, payload.password_confirm
    )
    return send_session(result, response, request.app.state.settings)

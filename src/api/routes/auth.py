"""Authentication routes.

This module handles HTTP endpoints for signup, login, logout and the password
reset flow. Sessions travel in an HTTP-only cookie.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, Response, status

from config import SESSION_COOKIE_NAME, SESSION_COOKIE_SECURE, SESSION_TTL_HOURS
from core.dependencies import (
    CurrentUserDep,
    PasswordResetManagerDep,
    SessionManagerDep,
    UserManagerDep,
    get_session_id,
)
from core.exceptions import (
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    ValidationError,
    WeakPasswordError,
)
from schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    ValidateResetTokenRequest,
    ValidateResetTokenResponse,
)
from utils import mailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a reset link has been sent"


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=SESSION_TTL_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
def signup(
    req: SignupRequest,
    response: Response,
    user_manager: UserManagerDep,
    sessions: SessionManagerDep,
) -> AuthResponse:
    """Create an account and log it in.

    Args:
        req: Signup request with name, email, password and role.
        response: Outgoing response, receives the session cookie.
        user_manager: Injected UserManager instance.
        sessions: Injected SessionManager instance.

    Returns:
        AuthResponse with the public account fields.

    Raises:
        HTTPException: 409 if the email is taken, 400 if the password is
            too short.
    """
    try:
        user = user_manager.create_account(
            name=req.name.strip(),
            email=req.email,
            password=req.password,
            role=req.role,
        )
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except (WeakPasswordError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    set_session_cookie(response, sessions.create_session(user.user_id))
    return AuthResponse(user=user.to_public())


@router.post("/login", response_model=AuthResponse, summary="Log in")
def login(
    req: LoginRequest,
    response: Response,
    user_manager: UserManagerDep,
    sessions: SessionManagerDep,
) -> AuthResponse:
    """Log in with email and password.

    Raises:
        HTTPException: 401 with the same message for an unknown email and a
            wrong password.
    """
    user = user_manager.verify_password(req.email, req.password)
    if user is None:
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    set_session_cookie(response, sessions.create_session(user.user_id))
    return AuthResponse(user=user.to_public())


@router.post("/logout", response_model=MessageResponse, summary="Log out")
def logout(
    request: Request,
    response: Response,
    sessions: SessionManagerDep,
) -> MessageResponse:
    """End the current session, if any, and clear the cookie."""
    sessions.destroy(get_session_id(request))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthResponse, summary="Current account")
def me(current_user: CurrentUserDep) -> AuthResponse:
    return AuthResponse(user=current_user.to_public())


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset link",
)
def forgot_password(
    req: ForgotPasswordRequest,
    resets: PasswordResetManagerDep,
    user_manager: UserManagerDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    """Issue a reset token and mail it.

    The response is the same whether or not the email belongs to an
    account, and whether or not the mail went out. Delivery runs after the
    response is sent, so its duration does not show in response time.
    """
    token = resets.request_reset(req.email)
    if token is not None:
        user = user_manager.get_by_email(req.email)
        background_tasks.add_task(mailer.send_password_reset_email, user.email, user.name, token)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/validate-reset-token",
    response_model=ValidateResetTokenResponse,
    summary="Check a password reset token",
)
def validate_reset_token(
    req: ValidateResetTokenRequest,
    resets: PasswordResetManagerDep,
) -> ValidateResetTokenResponse:
    return ValidateResetTokenResponse(valid=resets.validate_token(req.token))


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset the password with a token",
)
def reset_password(
    req: ResetPasswordRequest,
    resets: PasswordResetManagerDep,
) -> MessageResponse:
    """Set a new password using a reset token.

    Every session of the account ends, so the user logs in again with the
    new password.

    Raises:
        HTTPException: 400 if the token is invalid or expired, or the new
            password is too short.
    """
    try:
        resets.consume_token(req.token, req.new_password)
    except (InvalidOrExpiredTokenError, WeakPasswordError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return MessageResponse(message="Password has been reset successfully")

"""
Auth Controller

Token endpoints for API clients. The Streamlit app uses the same
AuthService through controllers/auth_controller.py.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.dependencies import bearer_scheme, http_error
from app.models import (
    ConfirmResetRequest,
    ResetPasswordRequest,
    ResetPasswordResponse,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
)
from config.database import get_db
from services.auth_service import AuthResult, AuthService, validate_sign_in_form, validate_sign_up_form
from services.errors import AppError

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_MESSAGE = "If an account exists for that email, a reset code has been issued."


def _token_response(result: AuthResult) -> TokenResponse:
    return TokenResponse(
        access_token=result.access_token,
        user_id=result.user.user_id,
        email=result.user.email,
        name=result.user.name,
    )


@router.post("/sign-up", response_model=TokenResponse, status_code=201)
def sign_up(body: SignUpRequest, db: Session = Depends(get_db)):
    """Create an account and return an access token."""
    error = validate_sign_up_form(body.email, body.password, body.confirm_password, body.full_name)
    if error:
        raise HTTPException(status_code=400, detail=error)
    try:
        return _token_response(AuthService(db).sign_up(body.email, body.password, body.full_name))
    except AppError as e:
        raise http_error(e, "API sign up")


@router.post("/sign-in", response_model=TokenResponse)
def sign_in(body: SignInRequest, db: Session = Depends(get_db)):
    error = validate_sign_in_form(body.email, body.password)
    if error:
        raise HTTPException(status_code=400, detail=error)
    try:
        return _token_response(AuthService(db).sign_in(body.email, body.password))
    except AppError as e:
        raise http_error(e, "API sign in")


@router.post("/sign-out", status_code=204)
def sign_out(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    """Revoke the caller's token. Signing out without a token is a no-op."""
    if credentials:
        AuthService(db).sign_out(credentials.credentials)


@router.post("/reset-password", response_model=ResetPasswordResponse)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        token = AuthService(db).reset_password(body.email)
    except AppError as e:
        raise http_error(e, "API password reset")
    return ResetPasswordResponse(success=True, message=RESET_MESSAGE, reset_token=token)


@router.post("/reset-password/confirm", status_code=204)
def confirm_reset_password(body: ConfirmResetRequest, db: Session = Depends(get_db)):
    try:
        AuthService(db).confirm_password_reset(body.token, body.new_password)
    except AppError as e:
        raise http_error(e, "API confirm password reset")

"""
Auth Controller - sign in, sign up, sign out and password reset for the
Streamlit app.

The access token lives in st.session_state.auth; config.auth reads it
back on every page.
"""

import logging
from typing import Optional

import streamlit as st

from config.auth import get_current_user
from config.database import SessionLocal
from services.auth_service import AuthService, validate_sign_in_form, validate_sign_up_form
from services.errors import AppError, log_error

logger = logging.getLogger(__name__)


class AuthController:
    """Controller for account flows."""

    def __init__(self):
        self._init_session_state()

    def _init_session_state(self):
        if "auth" not in st.session_state:
            st.session_state.auth = {}

    def is_signed_in(self) -> bool:
        return get_current_user() is not None

    def _store(self, result):
        st.session_state.auth = {
            "access_token": result.access_token,
            "user_id": result.user.user_id,
            "email": result.user.email,
            "name": result.user.name,
        }

    def sign_in(self, email: str, password: str) -> tuple[bool, Optional[str]]:
        """
        Sign in with email and password.

        Returns (success, error_message)
        """
        error = validate_sign_in_form(email, password)
        if error:
            return False, error

        db = SessionLocal()
        try:
            self._store(AuthService(db).sign_in(email, password))
            return True, None
        except AppError as e:
            return False, log_error(e, "Sign in").user_message
        finally:
            db.close()

    def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        full_name: str,
    ) -> tuple[bool, Optional[str]]:
        """
        Create an account and sign in.

        Returns (success, error_message)
        """
        error = validate_sign_up_form(email, password, confirm_password, full_name)
        if error:
            return False, error

        db = SessionLocal()
        try:
            self._store(AuthService(db).sign_up(email, password, full_name))
            return True, None
        except AppError as e:
            return False, log_error(e, "Sign up").user_message
        finally:
            db.close()

    def sign_out(self):
        token = st.session_state.auth.get("access_token")
        if token:
            db = SessionLocal()
            try:
                AuthService(db).sign_out(token)
            finally:
                db.close()
        st.session_state.auth = {}
        # Per-user state shouldn't leak into the next account
        for key in ("chef_assistant", "voice_chat", "messaging", "tts_demo"):
            st.session_state.pop(key, None)

    def request_password_reset(self, email: str) -> tuple[bool, Optional[str], Optional[str]]:
        """
        Start a password reset.

        Returns (success, error_message, reset_token). The token is shown
        in-app because there is no mail delivery.
        """
        db = SessionLocal()
        try:
            token = AuthService(db).reset_password(email)
            return True, None, token
        except AppError as e:
            return False, log_error(e, "Password reset").user_message, None
        finally:
            db.close()

    def confirm_password_reset(self, token: str, new_password: str, confirm_password: str) -> tuple[bool, Optional[str]]:
        if new_password != confirm_password:
            return False, "Passwords do not match"
        db = SessionLocal()
        try:
            AuthService(db).confirm_password_reset(token.strip(), new_password)
            return True, None
        except AppError as e:
            return False, log_error(e, "Confirm password reset").user_message
        finally:
            db.close()

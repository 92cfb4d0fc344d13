"""
Auth Service - sign up, sign in, sign out and password reset.

Passwords are hashed with Argon2 (argon2-cffi). Access tokens are JWTs
(see config/auth.py); sign-out revokes a token by its jti until it
would have expired anyway.

This service is pure Python with no Streamlit dependencies.
"""

import hashlib
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from sqlalchemy.orm import Session

from config.auth import UserContext, TokenError, decode_access_token, encode_access_token
from config.settings import get_settings
from models.entities import Profile, utcnow
from models.repositories import ProfileRepository
from services.errors import AuthenticationError, RateLimitError, ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_hasher = PasswordHasher()


@dataclass
class AuthResult:
    """A signed-in user and their access token."""
    user: UserContext
    access_token: str
    profile: Profile


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def validate_sign_up_form(email: str, password: str, confirm_password: str, full_name: str = "") -> Optional[str]:
    """
    Check the sign-up form before calling the service.

    Returns:
        An error message, or None when the form is valid
    """
    if not email.strip() or not password or not confirm_password or not full_name.strip():
        return "Please fill in all fields"
    if password != confirm_password:
        return "Passwords do not match"
    min_length = get_settings().min_password_length
    if len(password) < min_length:
        return f"Password must be at least {min_length} characters long"
    if not is_valid_email(normalize_email(email)):
        return "Please enter a valid email address"
    return None


def validate_sign_in_form(email: str, password: str) -> Optional[str]:
    if not email.strip() or not password:
        return "Please fill in all fields"
    if not is_valid_email(normalize_email(email)):
        return "Please enter a valid email address"
    return None


class AuthService:
    """Service for account lifecycle operations."""

    INVALID_CREDENTIALS = "Invalid email or password. Please check your credentials and try again."

    def __init__(self, db: Session):
        self.db = db
        self.profiles = ProfileRepository(db)
        self.settings = get_settings()

    # ==========================================
    # Sign up / sign in / sign out
    # ==========================================

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> AuthResult:
        """
        Create an account and sign the user in.

        Raises:
            ValidationError for a bad email, short password or taken email
        """
        email = normalize_email(email)
        if not email or not is_valid_email(email):
            raise ValidationError("Please enter a valid email address.")
        self._validate_password(password)
        if self.profiles.get_by_email(email):
            raise ValidationError("An account with this email already exists. Please sign in instead.")

        full_name = full_name.strip() if full_name else None
        profile = self.profiles.create(email, _hasher.hash(password), full_name=full_name or None)
        logger.info(f"Created account for profile {profile.ProfileId}")
        return self.create_access_token(profile)

    def sign_in(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and issue an access token.

        Raises:
            RateLimitError after too many recent failures for this email
            AuthenticationError for an unknown email or wrong password
        """
        email = normalize_email(email)
        since = utcnow() - timedelta(seconds=self.settings.sign_in_window_seconds)
        if self.profiles.count_failed_sign_ins(email, since) >= self.settings.max_sign_in_attempts:
            raise RateLimitError("Too many sign in attempts. Please wait a few minutes and try again.")

        profile = self.profiles.get_by_email(email)
        credential = self.profiles.get_credential(profile.ProfileId) if profile else None
        if not credential or not self._verify(credential.PasswordHash, password):
            self.profiles.record_failed_sign_in(email)
            logger.warning(f"Failed sign in for {email}")
            raise AuthenticationError(self.INVALID_CREDENTIALS)

        if _hasher.check_needs_rehash(credential.PasswordHash):
            self.profiles.set_password_hash(profile.ProfileId, _hasher.hash(password))

        self.profiles.clear_failed_sign_ins(email)
        logger.info(f"Profile {profile.ProfileId} signed in")
        return self.create_access_token(profile)

    def sign_out(self, token: str) -> None:
        """Revoke a token. Signing out with a bad token is a no-op."""
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
                options={"verify_exp": False},
            )
        except jwt.InvalidTokenError:
            return
        token_id = payload.get("jti")
        if not token_id:
            return
        expires_at = datetime.fromtimestamp(payload.get("exp", 0), tz=timezone.utc).replace(tzinfo=None)
        self.profiles.revoke_token(token_id, expires_at)
        logger.info(f"Profile {payload.get('sub')} signed out")

    def verify_access_token(self, token: str) -> UserContext:
        """
        Decode a token and make sure it is still valid.

        Raises:
            AuthenticationError for expired, malformed, revoked or orphaned tokens
        """
        try:
            user = decode_access_token(token)
        except TokenError as e:
            raise AuthenticationError(str(e)) from e
        if user.token_id and self.profiles.is_token_revoked(user.token_id):
            raise AuthenticationError("Session has been signed out. Please sign in again.")
        if not self.profiles.get_by_id(user.user_id):
            raise AuthenticationError("Account no longer exists.")
        return user

    # ==========================================
    # Password reset
    # ==========================================

    def reset_password(self, email: str) -> Optional[str]:
        """
        Start a password reset.

        Returns:
            The raw reset token to deliver to the user, or None when no
            account uses this email (the caller shouldn't reveal which)
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Please enter your email address")
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address.")

        profile = self.profiles.get_by_email(email)
        if not profile:
            logger.info("Password reset requested for unknown email")
            return None

        token = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(minutes=self.settings.password_reset_ttl_minutes)
        self.profiles.create_reset_token(profile.ProfileId, _hash_token(token), expires_at)
        logger.info(f"Password reset token issued for profile {profile.ProfileId}")
        return token

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            ValidationError for unknown, used or expired tokens, or a short password
        """
        record = self.profiles.get_reset_token(_hash_token(token or ""))
        if not record or record.UsedAt is not None or record.ExpiresAt < utcnow():
            raise ValidationError("This reset link is invalid or has expired.")
        self._validate_password(new_password)

        self.profiles.set_password_hash(record.ProfileId, _hasher.hash(new_password))
        self.profiles.mark_reset_token_used(record)
        logger.info(f"Password reset completed for profile {record.ProfileId}")

    # ==========================================
    # Helpers
    # ==========================================

    def check_username_availability(self, username: str) -> bool:
        username = (username or "").strip().lower()
        if not username:
            return False
        return self.profiles.get_by_username(username) is None

    def create_access_token(self, profile: Profile) -> AuthResult:
        token = encode_access_token(profile.ProfileId, profile.Email, profile.display_name)
        user = decode_access_token(token)
        return AuthResult(user=user, access_token=token, profile=profile)

    def _validate_password(self, password: str):
        if not password or len(password) < self.settings.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.settings.min_password_length} characters long."
            )

    @staticmethod
    def _verify(password_hash: str, password: str) -> bool:
        try:
            return _hasher.verify(password_hash, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError) as e:
            logger.error(f"Password hash could not be verified: {e}")
            return False


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

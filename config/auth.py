"""
Authentication Utilities

Users sign in with email and password (see services/auth_service.py) and
receive a signed JWT access token. The Streamlit app keeps that token in
session state; the API expects it as a Bearer token.

Token claims:
- sub: Profile ID (UUID string)
- email: Email address
- name: Display name at sign-in time
- jti: Token ID, used for sign-out revocation
- exp / iat: Expiry and issue timestamps
"""

import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import streamlit as st

from config.settings import get_settings


@dataclass
class UserContext:
    """Represents the authenticated user."""
    user_id: str  # Profile ID (UUID)
    name: str  # Display name or email
    email: Optional[str] = None
    token_id: Optional[str] = None  # jti of the token that authenticated this user


class TokenError(Exception):
    """Raised when an access token cannot be decoded."""


def encode_access_token(user_id: str, email: str, name: str) -> str:
    """Create a signed access token for a profile."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "name": name,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UserContext:
    """
    Decode and validate an access token.

    Raises:
        TokenError if the token is expired, malformed or has a bad signature
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Session expired. Please sign in again.") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid session token.") from e

    user_id = payload.get("sub")
    if not user_id:
        raise TokenError("Invalid session token.")

    return UserContext(
        user_id=user_id,
        name=payload.get("name") or payload.get("email") or "User",
        email=payload.get("email"),
        token_id=payload.get("jti"),
    )


def get_current_user() -> Optional[UserContext]:
    """
    Get the signed-in user for this Streamlit session.

    Returns:
        UserContext if authenticated, None otherwise
    """
    # Method 1: Token stored by the sign-in flow
    auth_state = st.session_state.get("auth") or {}
    token = auth_state.get("access_token")
    if token:
        try:
            return decode_access_token(token)
        except TokenError:
            # Expired tokens are dropped so the user sees the sign-in page
            st.session_state.auth = {}

    # Method 2: Check environment variables (for testing/development)
    user_id = os.environ.get("DEV_USER_ID")
    if user_id:
        return UserContext(
            user_id=user_id,
            name=os.environ.get("DEV_USER_NAME", "Dev User"),
            email=os.environ.get("DEV_USER_EMAIL")
        )

    return None


def require_auth() -> UserContext:
    """
    Require authentication - stops execution if not authenticated.

    Use this at the top of pages that require authentication.
    """
    user = get_current_user()

    if not user:
        st.warning("Please sign in to access this feature.")
        if st.button("Go to Sign In", type="primary"):
            st.switch_page("pages/1_🔐_Account.py")

        if os.environ.get("STREAMLIT_ENV") == "development":
            with st.expander("Development Mode"):
                st.code(
                    "# Set these environment variables to simulate a user:\n"
                    "export DEV_USER_ID='your-test-profile-id'\n"
                    "export DEV_USER_NAME='Test User'\n"
                    "export DEV_USER_EMAIL='test@example.com'",
                    language="bash"
                )

        st.stop()

    return user


def get_user_display_name() -> str:
    """Get the current user's display name, or 'Guest' if not authenticated."""
    user = get_current_user()
    return user.name if user else "Guest"


def is_authenticated() -> bool:
    """Check if a user is currently authenticated."""
    return get_current_user() is not None

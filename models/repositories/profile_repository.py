"""
Profile Repository - Data access for profiles and credentials.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from models.entities import (
    Profile,
    UserCredential,
    PasswordResetToken,
    RevokedToken,
    SignInAttempt,
    Recipe,
    Follower,
    utcnow,
)


class ProfileRepository:
    """Repository for profile and account database operations."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    # ==========================================
    # Profiles
    # ==========================================

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self.db.get(Profile, profile_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.Email == email).first()

    def get_by_username(self, username: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(
            func.lower(Profile.Username) == username.lower()
        ).first()

    def create(self, email: str, password_hash: str, full_name: Optional[str] = None) -> Profile:
        """Create a profile together with its credential row."""
        profile = Profile(Email=email, FullName=full_name)
        profile.credential = UserCredential(PasswordHash=password_hash)
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def update(self, profile: Profile, **fields) -> Profile:
        """Set the given PascalCase columns and bump UpdatedAt."""
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.UpdatedAt = utcnow()
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def search(self, query: str, exclude_id: Optional[str] = None, limit: int = 20) -> list[Profile]:
        """Case-insensitive match on username or full name."""
        pattern = f"%{query.strip().lower()}%"
        q = self.db.query(Profile).filter(
            or_(
                func.lower(Profile.Username).like(pattern),
                func.lower(Profile.FullName).like(pattern),
            )
        )
        if exclude_id:
            q = q.filter(Profile.ProfileId != exclude_id)
        return q.order_by(Profile.Username, Profile.FullName).limit(limit).all()

    def count_recipes(self, profile_id: str) -> int:
        return self.db.query(func.count(Recipe.RecipeId)).filter(
            Recipe.CreatedBy == profile_id
        ).scalar() or 0

    def count_followers(self, profile_id: str) -> int:
        return self.db.query(func.count(Follower.FollowId)).filter(
            Follower.FollowingId == profile_id
        ).scalar() or 0

    def count_following(self, profile_id: str) -> int:
        return self.db.query(func.count(Follower.FollowId)).filter(
            Follower.FollowerId == profile_id
        ).scalar() or 0

    # ==========================================
    # Credentials
    # ==========================================

    def get_credential(self, profile_id: str) -> Optional[UserCredential]:
        return self.db.get(UserCredential, profile_id)

    def set_password_hash(self, profile_id: str, password_hash: str) -> None:
        credential = self.get_credential(profile_id)
        if credential is None:
            credential = UserCredential(ProfileId=profile_id, PasswordHash=password_hash)
            self.db.add(credential)
        else:
            credential.PasswordHash = password_hash
            credential.UpdatedAt = utcnow()
        self.db.commit()

    # ==========================================
    # Password reset tokens
    # ==========================================

    def create_reset_token(self, profile_id: str, token_hash: str, expires_at: datetime) -> PasswordResetToken:
        token = PasswordResetToken(ProfileId=profile_id, TokenHash=token_hash, ExpiresAt=expires_at)
        self.db.add(token)
        self.db.commit()
        self.db.refresh(token)
        return token

    def get_reset_token(self, token_hash: str) -> Optional[PasswordResetToken]:
        return self.db.query(PasswordResetToken).filter(
            PasswordResetToken.TokenHash == token_hash
        ).first()

    def mark_reset_token_used(self, token: PasswordResetToken) -> None:
        token.UsedAt = utcnow()
        self.db.commit()

    # ==========================================
    # Token revocation and sign-in throttling
    # ==========================================

    def revoke_token(self, token_id: str, expires_at: datetime) -> None:
        if self.db.get(RevokedToken, token_id) is None:
            self.db.add(RevokedToken(TokenId=token_id, ExpiresAt=expires_at))
            self.db.commit()

    def is_token_revoked(self, token_id: str) -> bool:
        return self.db.get(RevokedToken, token_id) is not None

    def purge_expired_revocations(self) -> int:
        removed = self.db.query(RevokedToken).filter(RevokedToken.ExpiresAt < utcnow()).delete()
        self.db.commit()
        return removed

    def record_failed_sign_in(self, email: str) -> None:
        self.db.add(SignInAttempt(Email=email))
        self.db.commit()

    def count_failed_sign_ins(self, email: str, since: datetime) -> int:
        return self.db.query(func.count(SignInAttempt.SignInAttemptId)).filter(
            SignInAttempt.Email == email,
            SignInAttempt.AttemptedAt >= since,
        ).scalar() or 0

    def clear_failed_sign_ins(self, email: str) -> None:
        self.db.query(SignInAttempt).filter(SignInAttempt.Email == email).delete()
        self.db.commit()

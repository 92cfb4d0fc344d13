"""
SQLAlchemy ORM Entity Models

These models represent the database tables and define the relationships
between entities.

Database Design Rationale:
- Profiles are keyed by UUID strings so IDs can be shared in links and tokens
- Credentials live in their own table so profile rows are safe to expose
- Unique and check constraints back up the service-level social rules
  (one follow per pair, no self-follow, one favorite per recipe)
- Cascade deletes to maintain referential integrity

Table Relationships:
    Profile (1) ──┬──> (1) UserCredential
                  ├──> (*) Recipe ──> (*) Favorite
                  ├──> (*) Follower (as follower or as followed)
                  ├──> (*) ConversationParticipant ──> (1) Conversation ──> (*) Message
                  ├──> (*) Notification
                  └──> (*) ChatSession ──> (*) ChatMessage
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    Boolean,
    JSON,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from config.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo on round trip)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def direct_key(user_id: str, other_user_id: str) -> str:
    """Order-independent key for a two-person conversation."""
    return ":".join(sorted((user_id, other_user_id)))


def new_uuid() -> str:
    return str(uuid.uuid4())


NOTIFICATION_TYPES = ("follow", "like", "comment", "recipe_created", "message")
DIFFICULTY_LEVELS = ("easy", "medium", "hard")


# ============================================
# Accounts
# ============================================

class Profile(Base):
    """
    Public user profile.

    Created at sign-up. The username is optional until the user picks
    one and is always stored lowercased.
    """
    __tablename__ = "Profiles"

    ProfileId = Column(String(36), primary_key=True, default=new_uuid)
    Email = Column(String(255), nullable=False, unique=True)
    Username = Column(String(50), nullable=True, unique=True)
    FullName = Column(String(200), nullable=True)
    AvatarUrl = Column(String(500), nullable=True)
    Bio = Column(Text, nullable=True)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)

    credential = relationship(
        "UserCredential",
        back_populates="profile",
        uselist=False,
        cascade="all, delete-orphan"
    )
    recipes = relationship("Recipe", back_populates="author", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.FullName or self.Username or self.Email


class UserCredential(Base):
    """Argon2 password hash for a profile."""
    __tablename__ = "UserCredentials"

    ProfileId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        primary_key=True
    )
    PasswordHash = Column(String(255), nullable=False)
    CreatedAt = Column(DateTime, nullable=False, server_default=func.now())
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)

    profile = relationship("Profile", back_populates="credential")


class PasswordResetToken(Base):
    """
    Single-use password reset token.

    Only a SHA-256 hash of the token is stored; the raw value is handed
    to the user once.
    """
    __tablename__ = "PasswordResetTokens"

    PasswordResetTokenId = Column(Integer, primary_key=True, autoincrement=True)
    ProfileId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    TokenHash = Column(String(64), nullable=False, unique=True)
    ExpiresAt = Column(DateTime, nullable=False)
    UsedAt = Column(DateTime, nullable=True)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)


class RevokedToken(Base):
    """Access tokens invalidated by sign-out, kept until they expire."""
    __tablename__ = "RevokedTokens"

    TokenId = Column(String(64), primary_key=True)  # JWT jti claim
    ExpiresAt = Column(DateTime, nullable=False)


class SignInAttempt(Base):
    """Failed sign-in attempts, used for per-email throttling."""
    __tablename__ = "SignInAttempts"

    SignInAttemptId = Column(Integer, primary_key=True, autoincrement=True)
    Email = Column(String(255), nullable=False, index=True)
    AttemptedAt = Column(DateTime, nullable=False, default=utcnow)


# ============================================
# Recipes
# ============================================

class Recipe(Base):
    """
    A recipe shared to the community feed.

    Ingredients and instructions are stored as ordered JSON lists of
    strings.
    """
    __tablename__ = "Recipes"
    __table_args__ = (
        CheckConstraint("Difficulty IN ('easy', 'medium', 'hard')", name="ck_recipes_difficulty"),
        CheckConstraint("PrepTime >= 0", name="ck_recipes_prep_time"),
        CheckConstraint("CookTime >= 0", name="ck_recipes_cook_time"),
        CheckConstraint("Servings > 0", name="ck_recipes_servings"),
    )

    RecipeId = Column(Integer, primary_key=True, autoincrement=True)
    Title = Column(String(200), nullable=False)
    Description = Column(Text, nullable=True)
    ImageUrl = Column(String(500), nullable=True)
    Category = Column(String(100), nullable=True)     # e.g., "Dinner", "Dessert"
    Difficulty = Column(String(10), nullable=False, default="easy")
    PrepTime = Column(Integer, nullable=False, default=0)  # Minutes
    CookTime = Column(Integer, nullable=False, default=0)  # Minutes
    Servings = Column(Integer, nullable=False, default=1)
    Ingredients = Column(JSON, nullable=False, default=list)
    Instructions = Column(JSON, nullable=False, default=list)
    CreatedBy = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    LikesCount = Column(Integer, nullable=False, default=0)
    CommentsCount = Column(Integer, nullable=False, default=0)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)

    author = relationship("Profile", back_populates="recipes")
    favorites = relationship("Favorite", back_populates="recipe", cascade="all, delete-orphan")


class Favorite(Base):
    """A user's saved recipe."""
    __tablename__ = "Favorites"
    __table_args__ = (
        UniqueConstraint("UserId", "RecipeId", name="uq_favorites_user_recipe"),
    )

    FavoriteId = Column(Integer, primary_key=True, autoincrement=True)
    UserId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    RecipeId = Column(
        Integer,
        ForeignKey("Recipes.RecipeId", ondelete="CASCADE"),
        nullable=False
    )
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)

    recipe = relationship("Recipe", back_populates="favorites")


# ============================================
# Social Graph
# ============================================

class Follower(Base):
    """Directed follow edge: FollowerId follows FollowingId."""
    __tablename__ = "Followers"
    __table_args__ = (
        UniqueConstraint("FollowerId", "FollowingId", name="uq_followers_pair"),
        CheckConstraint("FollowerId <> FollowingId", name="ck_followers_not_self"),
    )

    FollowId = Column(Integer, primary_key=True, autoincrement=True)
    FollowerId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    FollowingId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)

    follower = relationship("Profile", foreign_keys=[FollowerId])
    following = relationship("Profile", foreign_keys=[FollowingId])


# ============================================
# Messaging
# ============================================

class Conversation(Base):
    """A direct-message thread between participants."""
    __tablename__ = "Conversations"

    ConversationId = Column(Integer, primary_key=True, autoincrement=True)
    Title = Column(String(200), nullable=True)
    # Sorted "a:b" participant pair; NULL for anything but direct messages
    DirectKey = Column(String(100), nullable=True, unique=True)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)
    LastMessageAt = Column(DateTime, nullable=False, default=utcnow)

    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan"
    )
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.MessageId"
    )


class ConversationParticipant(Base):
    """Membership of a profile in a conversation."""
    __tablename__ = "ConversationParticipants"
    __table_args__ = (
        UniqueConstraint("ConversationId", "UserId", name="uq_participants_conversation_user"),
    )

    ParticipantId = Column(Integer, primary_key=True, autoincrement=True)
    ConversationId = Column(
        Integer,
        ForeignKey("Conversations.ConversationId", ondelete="CASCADE"),
        nullable=False
    )
    UserId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    JoinedAt = Column(DateTime, nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="participants")
    profile = relationship("Profile")


class Message(Base):
    """A single message in a conversation."""
    __tablename__ = "Messages"

    MessageId = Column(Integer, primary_key=True, autoincrement=True)
    ConversationId = Column(
        Integer,
        ForeignKey("Conversations.ConversationId", ondelete="CASCADE"),
        nullable=False
    )
    SenderId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    Content = Column(Text, nullable=False)
    IsRead = Column(Boolean, nullable=False, default=False)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("Profile")


# ============================================
# Notifications
# ============================================

class Notification(Base):
    """In-app notification (follow, like, comment, new recipe, message)."""
    __tablename__ = "Notifications"
    __table_args__ = (
        CheckConstraint(
            "Type IN ('follow', 'like', 'comment', 'recipe_created', 'message')",
            name="ck_notifications_type"
        ),
    )

    NotificationId = Column(Integer, primary_key=True, autoincrement=True)
    UserId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    ActorId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="SET NULL"),
        nullable=True
    )
    Type = Column(String(20), nullable=False)
    Title = Column(String(200), nullable=False)
    Message = Column(Text, nullable=False)
    Data = Column(JSON, nullable=True)
    IsRead = Column(Boolean, nullable=False, default=False)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)

    actor = relationship("Profile", foreign_keys=[ActorId])


# ============================================
# Chef Assistant Chat History
# ============================================

class ChatSession(Base):
    """A saved conversation with one of the chef assistants."""
    __tablename__ = "ChatSessions"

    ChatSessionId = Column(String(36), primary_key=True, default=new_uuid)
    UserId = Column(
        String(36),
        ForeignKey("Profiles.ProfileId", ondelete="CASCADE"),
        nullable=False
    )
    Title = Column(String(200), nullable=False)
    ChefId = Column(String(50), nullable=False)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)

    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessage.ChatMessageId"
    )


class ChatMessage(Base):
    """A message in a saved chef chat. Sender is 'user' or 'chef'."""
    __tablename__ = "ChatMessages"

    ChatMessageId = Column(Integer, primary_key=True, autoincrement=True)
    ChatSessionId = Column(
        String(36),
        ForeignKey("ChatSessions.ChatSessionId", ondelete="CASCADE"),
        nullable=False
    )
    Sender = Column(String(10), nullable=False)
    Content = Column(Text, nullable=False)
    MessageType = Column(String(10), nullable=False, default="text")  # text, image, voice
    MessageMetadata = Column(JSON, nullable=True)
    CreatedAt = Column(DateTime, nullable=False, default=utcnow)

    session = relationship("ChatSession", back_populates="messages")


# ============================================
# Preferences
# ============================================

class UserPreference(Base):
    """Per-user preferences stored as a JSON blob (see models/user_preferences.py)."""
    __tablename__ = "UserPreferences"

    UserPreferenceId = Column(Integer, primary_key=True, autoincrement=True)
    UserId = Column(String(36), nullable=False, unique=True)
    Preferences = Column(Text, nullable=False, default="{}")
    CreatedAt = Column(DateTime, nullable=False, server_default=func.now())
    UpdatedAt = Column(DateTime, nullable=False, default=utcnow)

"""
Follower Repository - Data access for the follow graph.
"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from models.entities import Follower, Profile


class FollowerRepository:
    """Repository for follow edges."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    def get(self, follower_id: str, following_id: str) -> Optional[Follower]:
        return self.db.query(Follower).filter(
            Follower.FollowerId == follower_id,
            Follower.FollowingId == following_id,
        ).first()

    def create(self, follower_id: str, following_id: str) -> Follower:
        edge = Follower(FollowerId=follower_id, FollowingId=following_id)
        self.db.add(edge)
        self.db.commit()
        self.db.refresh(edge)
        return edge

    def delete(self, follower_id: str, following_id: str) -> bool:
        removed = self.db.query(Follower).filter(
            Follower.FollowerId == follower_id,
            Follower.FollowingId == following_id,
        ).delete()
        self.db.commit()
        return removed > 0

    def list_followers(self, user_id: str) -> list[Profile]:
        """Profiles following user_id, newest follow first."""
        edges = self.db.query(Follower).options(
            joinedload(Follower.follower)
        ).filter(
            Follower.FollowingId == user_id
        ).order_by(Follower.CreatedAt.desc(), Follower.FollowId.desc()).all()
        return [edge.follower for edge in edges]

    def list_following(self, user_id: str) -> list[Profile]:
        """Profiles user_id follows, newest follow first."""
        edges = self.db.query(Follower).options(
            joinedload(Follower.following)
        ).filter(
            Follower.FollowerId == user_id
        ).order_by(Follower.CreatedAt.desc(), Follower.FollowId.desc()).all()
        return [edge.following for edge in edges]

    def following_ids(self, user_id: str, among: list[str]) -> set[str]:
        """Which of `among` user_id follows."""
        if not among:
            return set()
        rows = self.db.query(Follower.FollowingId).filter(
            Follower.FollowerId == user_id,
            Follower.FollowingId.in_(among),
        ).all()
        return {row[0] for row in rows}

    def follower_ids(self, user_id: str) -> list[str]:
        rows = self.db.query(Follower.FollowerId).filter(Follower.FollowingId == user_id).all()
        return [row[0] for row in rows]

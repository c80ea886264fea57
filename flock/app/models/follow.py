# flock/app/models/follow.py
from sqlalchemy import Column, Integer, DateTime, Index
from sqlalchemy.sql import func

from flock.app.db.base import Base


class Follow(Base):
    """Directed edge: follower_id follows followed_id."""
    __tablename__ = "follows"

    follower_id = Column(Integer, primary_key=True)
    followed_id = Column(Integer, primary_key=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_follows_followed_id", "followed_id"),
    )

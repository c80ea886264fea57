# flock/app/models/id_allocation.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from flock.app.db.base import Base


class IdAllocation(Base):
    """
    One row per id handed out before the entity itself is persisted.

    Users need their id before hashing the password. Messages draw from the
    same sequence so that an id freed by a delete is never reused.
    """
    __tablename__ = "id_allocations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(32), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

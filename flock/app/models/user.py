# flock/app/models/user.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from flock.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    # Allocated through IdAllocation before the row exists, the password
    # hash is salted with it
    id = Column(Integer, primary_key=True, autoincrement=False)
    login = Column(String(12), unique=True, index=True, nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)

    # sha256(id + password), hex encoded
    password = Column(String(64), nullable=False)

    avatar = Column(String(2048), nullable=False, default="")
    cover_picture = Column(String(2048), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

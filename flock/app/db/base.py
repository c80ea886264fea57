# flock/app/db/base.py
"""
Declarative base shared by every ORM model.

Engine and sessions live in db/session.py.
"""
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Stable constraint names, identical on SQLite and PostgreSQL
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Usage:
        class Message(Base):
            __tablename__ = "messages"
            id = Column(Integer, primary_key=True)
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

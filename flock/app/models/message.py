# flock/app/models/message.py
from sqlalchemy import Column, Integer, Text, DateTime

from flock.app.db.base import Base


class Message(Base):
    __tablename__ = "messages"

    # Allocated through id_allocations, never by the table itself
    id = Column(Integer, primary_key=True, autoincrement=False)
    text = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)

    # Weak reference to the author: no foreign key, deleting a user
    # removes its messages in a separate step
    user_id = Column(Integer, index=True, nullable=False)

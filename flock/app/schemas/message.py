# flock/app/schemas/message.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from flock.app.schemas.user import UserResponse


class MessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    text: str
    date: datetime
    user_id: int

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class OwnerRef(BaseModel):
    """Only the id of an embedded user is read from a request body."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None


class MessageIn(BaseModel):
    """
    Body of POST /messages and POST /messages/{id}.

    The author may be sent as "owner" or, like the responses of older
    clients, as "user".
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    text: Optional[str] = None
    date: Optional[datetime] = None
    owner: Optional[OwnerRef] = Field(
        default=None, validation_alias=AliasChoices("owner", "user")
    )


class MessageResponse(BaseModel):
    id: int
    text: str
    date: datetime
    owner: UserResponse

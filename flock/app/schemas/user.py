# flock/app/schemas/user.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """A user as persisted. Request-scoped copy, written back wholesale."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: str
    password: str
    email: str
    avatar: str = ""
    cover_picture: str = ""


class UserCreate(BaseModel):
    """Body of POST /users. Fields are checked by the service, not here."""
    model_config = ConfigDict(extra="ignore")

    login: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class UserUpdate(BaseModel):
    """Body of POST /users/{id}: every attribute is optional."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    login: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    cover_picture: Optional[str] = Field(default=None, alias="coverPicture")


class UserResponse(BaseModel):
    """
    Outbound user. `password` is always the mask, `email` is the mask
    unless the viewer is the user.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    login: Optional[str] = None
    avatar: Optional[str] = None
    cover_picture: Optional[str] = Field(default=None, alias="coverPicture")
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    login: Optional[str] = None
    password: Optional[str] = None


class TokenPayload(BaseModel):
    sub: Optional[str] = None


class Avatar(BaseModel):
    """Reply of the avatar upload, instead of a bare string."""
    model_config = ConfigDict(populate_by_name=True)

    serving_url: str = Field(alias="servingUrl")

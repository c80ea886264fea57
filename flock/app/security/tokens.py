# flock/app/security/tokens.py
"""
Stateless bearer tokens: an HS256 JWT whose "sub" claim is the user id.

No server-side session exists, a token stays valid while its signature
checks out (and until "exp" when ACCESS_TOKEN_EXPIRE_MINUTES is set).
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from flock.app.core.config import Settings, settings
from flock.app.core.validation import is_id
from flock.app.schemas.user import TokenPayload


class InvalidToken(Exception):
    pass


def create_access_token(user_id: int, config: Settings = settings,
                        expires_delta: Optional[timedelta] = None) -> str:
    to_encode = {"sub": str(user_id)}
    if expires_delta is None and config.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    if expires_delta is not None:
        to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def read_user_id(token: str, config: Settings = settings) -> int:
    """
    Verify the signature and return the embedded user id.

    Raises:
        InvalidToken: bad signature, expired, or no usable "sub"
    """
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        raise InvalidToken(str(e)) from e

    if not is_id(token_data.sub):
        raise InvalidToken("Token subject is not a user id")
    return int(token_data.sub)

# flock/app/api/binding.py
"""
Typed access to path ids, query parameters and JSON bodies.

Binding only checks syntax: a well-formed body with missing or invalid
fields goes through, the services validate fields.
"""
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Type, TypeVar

from fastapi import Path, Request, Response
from pydantic import BaseModel, ValidationError

from flock.app.core.errors import invalid_request
from flock.app.core.validation import is_id
from flock.app.schemas.user import UserRecord

ME = "me"
CONTINUATION_HEADER = "X-Continuation-Token"
INTEGER_PATTERN = re.compile(r"-?[0-9]+")

_TRUE = {"", "true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class IdRef:
    """A numeric id, or `me` (value None) until the caller is known."""
    value: Optional[int]

    @property
    def is_me(self) -> bool:
        return self.value is None

    def resolve(self, caller: UserRecord) -> int:
        return caller.id if self.value is None else self.value


def parse_id(raw: str, allow_me: bool = True) -> IdRef:
    if allow_me and raw == ME:
        return IdRef(None)
    if is_id(raw):
        return IdRef(int(raw))
    raise invalid_request(f"Invalid id {raw!r}")


# Path dependencies. They are declared before the caller in the
# endpoints, so a malformed id fails before the store is touched.

def user_id_path(user_id: str = Path(..., description="Numeric id or `me`")) -> IdRef:
    return parse_id(user_id)


def message_id_path(message_id: str = Path(..., description="Numeric id")) -> int:
    return parse_id(message_id, allow_me=False).value


class QueryParams:

    def __init__(self, params: Mapping[str, str]):
        self.params = params

    def has(self, name: str) -> bool:
        return name in self.params

    def string(self, name: str) -> Optional[str]:
        return self.params.get(name)

    def integer(self, name: str) -> Optional[int]:
        raw = self.params.get(name)
        if raw is None:
            return None
        value = raw.strip()
        if INTEGER_PATTERN.fullmatch(value):
            return int(value)
        raise invalid_request(f"Parameter {name} must be an integer")

    def boolean(self, name: str) -> Optional[bool]:
        """A bare `?name` counts as true."""
        raw = self.params.get(name)
        if raw is None:
            return None
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise invalid_request(f"Parameter {name} must be true or false")

    def identifier(self, name: str) -> Optional[IdRef]:
        """A user reference; an empty value means the caller."""
        raw = self.params.get(name)
        if raw is None:
            return None
        if raw == "":
            return IdRef(None)
        return parse_id(raw)


def get_query(request: Request) -> QueryParams:
    return QueryParams(request.query_params)


async def read_json_body(request: Request, model: Type[M], required: bool = True) -> Optional[M]:
    raw = await request.body()
    if not raw.strip():
        if required:
            raise invalid_request()
        return None
    try:
        return model.model_validate_json(raw)
    except ValidationError:
        raise invalid_request()


class JsonBody:
    """Dependency decoding the request body into `model`."""

    def __init__(self, model: Type[BaseModel], required: bool = True):
        self.model = model
        self.required = required

    async def __call__(self, request: Request) -> Optional[BaseModel]:
        return await read_json_body(request, self.model, self.required)


def set_continuation_token(response: Response, cursor: Optional[str]) -> None:
    if cursor:
        response.headers[CONTINUATION_HEADER] = cursor

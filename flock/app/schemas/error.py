# flock/app/schemas/error.py
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    status: int
    code: str
    message: str

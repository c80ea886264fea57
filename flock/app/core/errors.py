# flock/app/core/errors.py
"""
Failure values shared by every layer of the API.

Two exception types exist:

- StorageError: raised by the data layer (repositories, blob stores).
  It carries the collaborator's own status/code/message so the API layer
  can wrap it without losing the cause.
- ApiError: raised by services, the auth context and request binding.
  Its `kind` discriminates client mistakes from infrastructure failures.

The dispatcher (api/errors.py) is the only place that turns either of them
into an HTTP response.
"""
import enum
from typing import Dict, Union


class ErrorKind(str, enum.Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNSUPPORTED_MEDIA = "unsupported_media"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class StorageError(Exception):
    """Failure reported by a storage collaborator (database, bucket)."""

    def __init__(self, status: int, code: str, message: str):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message


class ApiError(Exception):
    """
    A failure that is rendered as ``{"status", "code", "message"}``.

    Created at the point of failure and propagated unchanged up to the
    dispatcher.
    """

    def __init__(self, status: int, code: str, message: str, kind: ErrorKind):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message
        self.kind = kind

    def __repr__(self) -> str:
        return f"ApiError({self.status}, {self.code!r}, {self.message!r})"

    def to_dict(self) -> Dict[str, Union[int, str]]:
        return {"status": self.status, "code": self.code, "message": self.message}

    @classmethod
    def from_storage(cls, error: StorageError) -> "ApiError":
        """Wrap a data-layer failure, keeping its status, code and message."""
        return cls(error.status, error.code, error.message, ErrorKind.UPSTREAM)


# ─────────────────────────────────────────────────────────────────────────────
# Authentication
# ─────────────────────────────────────────────────────────────────────────────
def invalid_authorization(message: str = "Invalid authorization header format") -> ApiError:
    return ApiError(401, "invalidAuthorization", message, ErrorKind.AUTHENTICATION)


def invalid_credentials() -> ApiError:
    return ApiError(401, "invalidCredentials", "Incorrect login or password", ErrorKind.AUTHENTICATION)


# ─────────────────────────────────────────────────────────────────────────────
# Authorization
# ─────────────────────────────────────────────────────────────────────────────
def unauthorized_operation(message: str) -> ApiError:
    return ApiError(400, "unauthorizedOperation", message, ErrorKind.AUTHORIZATION)


def unauthorized_messages() -> ApiError:
    return ApiError(
        401,
        "unauthorizedMessages",
        "You can see only your messages or the messages of followed users",
        ErrorKind.AUTHORIZATION,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Not found
# ─────────────────────────────────────────────────────────────────────────────
def user_not_found() -> ApiError:
    return ApiError(404, "userNotFound", "The user you requested does not exist", ErrorKind.NOT_FOUND)


def message_not_found(message_id: int) -> ApiError:
    return ApiError(
        404,
        "messageNotFound",
        f"The message with ID {message_id} does not exist",
        ErrorKind.NOT_FOUND,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────
def invalid_request(message: str = "Invalid JSON body") -> ApiError:
    return ApiError(400, "invalidRequest", message, ErrorKind.VALIDATION)


def invalid_field(code: str, message: str) -> ApiError:
    """invalidLogin, invalidPassword, invalidEmail, invalidAvatar, ..."""
    return ApiError(400, code, message, ErrorKind.VALIDATION)


def duplicate_login() -> ApiError:
    return ApiError(400, "duplicateLogin", "Duplicate login", ErrorKind.VALIDATION)


def duplicate_email() -> ApiError:
    return ApiError(400, "duplicateEmail", "Duplicate email", ErrorKind.VALIDATION)


def mimetype_error(message: str) -> ApiError:
    return ApiError(415, "mimetypeError", message, ErrorKind.UNSUPPORTED_MEDIA)

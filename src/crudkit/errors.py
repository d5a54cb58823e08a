"""
crudkit error types, shared by the client and server halves.

Every error carries an HTTP status so it can travel over the wire in the
`{statusCode, message}` envelope.
"""

from typing import Any, Optional

DEFAULT_STATUS = 500


def coerce_status(status: Any, default: int = DEFAULT_STATUS) -> int:
    """Return `status` if it is a valid HTTP status code, else `default`."""
    if isinstance(status, int) and not isinstance(status, bool) and 100 <= status <= 599:
        return status
    return default


class CrudKitError(Exception):
    def __init__(self, message: str, status: int = DEFAULT_STATUS, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status = coerce_status(status)
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status})"


class ConfigurationError(CrudKitError):
    """Base URL or session key missing. Not retried."""

    def __init__(self, message: str):
        super().__init__(message)


class TransportError(CrudKitError):
    """The HTTP call failed or its body could not be parsed as JSON."""

    def __init__(self, message: str, status: int = DEFAULT_STATUS):
        super().__init__(message, status)


class APIError(CrudKitError):
    """A failed response as seen by the client."""


# Server side


class ResponseError(CrudKitError):
    def __init__(self, status: int, message: str):
        super().__init__(message, status)


class BadRequestError(ResponseError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(400, message or "There was a problem processing your request.")


class UnauthorizedError(ResponseError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(401, message or "You are not authorized to make that request")


class NotFoundError(ResponseError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(404, message or "The requested resource could not be found.")


class UnprocessableEntityError(ResponseError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(422, message or "Your request could not be completed.")


class InternalServerError(ResponseError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(500, message or "There was an internal server error")

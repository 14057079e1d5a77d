from __future__ import annotations


class GatewayError(Exception):
    """Base class for failures talking to the scoring backend."""


class TransportError(GatewayError):
    """The request never produced a usable HTTP response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(GatewayError):
    """The backend answered with a payload missing or mistyping expected fields."""


class StatusError(GatewayError):
    """The backend rejected the request through its ``status`` envelope."""

    def __init__(self, code: int, message: str):
        super().__init__(message or f"backend status {code}")
        self.code = code
        self.message = message


class NotFound(StatusError):
    pass


__all__ = [
    "GatewayError",
    "MalformedResponse",
    "NotFound",
    "StatusError",
    "TransportError",
]

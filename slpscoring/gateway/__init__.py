"""Remote scoring gateway: the backend contract consumed by the session core."""

from .client import HOLES_PER_ROUND, ScoringGateway
from .errors import (
    GatewayError,
    MalformedResponse,
    NotFound,
    StatusError,
    TransportError,
)
from .wire import SubmittedScore

__all__ = [
    "HOLES_PER_ROUND",
    "GatewayError",
    "MalformedResponse",
    "NotFound",
    "ScoringGateway",
    "StatusError",
    "SubmittedScore",
    "TransportError",
]

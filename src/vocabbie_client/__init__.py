"""Vocabbie quiz client: session driver for the remote scoring server."""

from .config import Settings
from .controller import QuizController
from .errors import (
    NoActiveSession,
    ProtocolError,
    SessionStartFailed,
    TransportError,
    VocabbieError,
)
from .modes import QuizMode
from .navigation import Page
from .results import Results, aggregate_results
from .transport import Transport

__all__ = [
    "Settings",
    "QuizController",
    "QuizMode",
    "Page",
    "Results",
    "aggregate_results",
    "Transport",
    "VocabbieError",
    "TransportError",
    "ProtocolError",
    "SessionStartFailed",
    "NoActiveSession",
]

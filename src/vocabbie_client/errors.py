"""Exception taxonomy for the quiz client."""

from __future__ import annotations

from typing import Optional


class VocabbieError(Exception):
    """Base class for every error raised by the client core."""


class TransportError(VocabbieError):
    """Network failure, non-2xx status, or a body that is not JSON."""

    def __init__(self, path: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.status = status


class ProtocolError(VocabbieError):
    """A response that does not decode into the expected message shape."""

    def __init__(self, path: str, message: str, key: Optional[str] = None) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.key = key


class SessionStartFailed(VocabbieError):
    """The server answered ``/start`` with session ``0``."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Server refused to start a {kind!r} session")
        self.kind = kind


class NoActiveSession(VocabbieError):
    """An interaction was requested while no session is registered."""


__all__ = [
    "VocabbieError",
    "TransportError",
    "ProtocolError",
    "SessionStartFailed",
    "NoActiveSession",
]

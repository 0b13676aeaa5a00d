"""Single-session registry: none -> active -> none."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import NoActiveSession, SessionStartFailed
from .schemas import START_PATH, Message
from .transport import Transport


logger = logging.getLogger(__name__)


class SessionRegistry:
    """Holds the one session id a client may have open at a time."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self._session_id: Optional[int] = None

    async def start_session(self, kind: str) -> int:
        reply = await self.transport.send(START_PATH, Message(0, {"kind": kind}))
        if reply.session == 0:
            logger.warning("Failed to start a session.")
            raise SessionStartFailed(kind)
        if self._session_id is not None:
            # The previous session is dropped without telling the server.
            logger.info("Discarding session %s in favour of %s", self._session_id, reply.session)
        self._session_id = reply.session
        logger.info("New %s session ID is %s", kind, reply.session)
        return reply.session

    def current_session(self) -> Optional[int]:
        return self._session_id

    def require_session(self) -> int:
        if self._session_id is None:
            raise NoActiveSession("No active session")
        return self._session_id

    def clear(self) -> None:
        self._session_id = None


__all__ = ["SessionRegistry"]

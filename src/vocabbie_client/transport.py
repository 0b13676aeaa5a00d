"""JSON-over-HTTP transport to the scoring server."""

from __future__ import annotations

import asyncio
import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Optional

from .config import Settings
from .errors import TransportError
from .schemas import START_PATH, STATE_PATH, SUBMIT_PATH, Message


logger = logging.getLogger(__name__)

ENDPOINTS = frozenset({START_PATH, STATE_PATH, SUBMIT_PATH})


class Transport:
    """Stateless request function: one POST per call, no retries, no caching.

    The blocking ``urllib`` call runs in a worker thread so callers can await
    it from the single cooperative flow that drives a session.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings.load()

    async def send(self, path: str, message: Message) -> Message:
        if path not in ENDPOINTS:
            raise ValueError(f"Unknown endpoint: {path}")
        return await asyncio.to_thread(self._post, path, message)

    def _post(self, path: str, message: Message) -> Message:
        url = self.settings.base_url + path
        body = json.dumps(message.to_json(), ensure_ascii=False).encode("utf-8")
        request = urllib.request.Request(
            url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("POST %s session=%s details=%s", path, message.session, message.details)
        try:
            with urllib.request.urlopen(request, timeout=self.settings.request_timeout) as response:
                status = response.status
                raw = response.read()
        except urllib.error.HTTPError as exc:
            raise TransportError(path, f"HTTP {exc.code} {exc.reason}", status=exc.code) from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise TransportError(path, f"request failed: {exc}") from exc

        if not 200 <= status < 300:
            raise TransportError(path, f"HTTP {status}", status=status)

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError(path, f"Invalid JSON: {exc}", status=status) from exc

        reply = Message.from_json(payload, path)
        logger.debug("%s -> session=%s details=%s", path, reply.session, reply.details)
        return reply


__all__ = ["ENDPOINTS", "Transport"]

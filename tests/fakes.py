"""Test doubles: an in-memory scripted transport and a live fake scoring server."""

from __future__ import annotations

import asyncio
import json
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple

from vocabbie_client.schemas import Message


def reply(session: int = 7, **details: Any) -> Message:
    return Message(session, {key: str(value) for key, value in details.items()})


class ScriptedTransport:
    """Returns queued replies per path and records every request.

    The last queued reply for a path is reused once the queue runs dry. A
    queued exception instance is raised instead of returned.
    """

    def __init__(self, log: Optional[List[Tuple]] = None, pause: float = 0.0) -> None:
        self.log: List[Tuple] = log if log is not None else []
        self._replies: Dict[str, List[Any]] = {}
        self.pause = pause

    def script(self, path: str, *replies: Any) -> "ScriptedTransport":
        self._replies.setdefault(path, []).extend(replies)
        return self

    def requests(self, path: Optional[str] = None) -> List[Tuple[str, Message]]:
        return [
            (entry[1], entry[2])
            for entry in self.log
            if entry[0] == "send" and (path is None or entry[1] == path)
        ]

    async def send(self, path: str, message: Message) -> Message:
        self.log.append(("send", path, message))
        if self.pause:
            await asyncio.sleep(self.pause)
        queue = self._replies.get(path)
        if not queue:
            raise AssertionError(f"No reply scripted for {path}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item


WORDS = [
    ("abandon", ["leave behind", "collect", "admire"], 0),
    ("brisk", ["slow", "quick and energetic", "bitter"], 1),
    ("candid", ["sweet", "hidden", "frank"], 2),
    ("dwindle", ["shrink", "sparkle", "argue"], 0),
    ("eerie", ["cheerful", "strange and frightening", "loud"], 1),
]

SCORES = {
    "standard": {"uls": 4200, "rfwls": 3900},
    "recall": {"uls": 5100, "rfwls": 4800, "heu": 5000},
    "recall-tyv": {"tyv": 6100},
    "recall-mass": {"uls": 4700, "heu": 4500},
}

BATCH_SIZE = 3
RESULT_THRESHOLD = 2


class QuizBackend:
    """Tiny deterministic stand-in for the scoring server."""

    def __init__(self) -> None:
        self.sessions: Dict[int, Dict[str, Any]] = {}
        self.refuse_start = False
        self.submissions: List[Dict[str, str]] = []
        self._next_id = 41
        self._lock = threading.Lock()

    def start(self, details: Dict[str, str]) -> Message:
        kind = details.get("kind", "")
        if self.refuse_start or kind not in SCORES:
            return Message(0, {})
        with self._lock:
            self._next_id += 1
            session_id = self._next_id
            self.sessions[session_id] = {"kind": kind, "cursor": 0, "answered": 0}
        return Message(session_id, {})

    def state(self, session_id: int) -> Message:
        session = self.sessions[session_id]
        available = "true" if session["answered"] >= RESULT_THRESHOLD else "false"
        details = {"result_available": available}
        cursor = session["cursor"]
        if session["kind"] == "recall-mass":
            batch = WORDS[cursor:cursor + BATCH_SIZE]
            details["questions"] = ";;;".join(word for word, _, _ in batch)
            return Message(session_id, details)
        word, candidates, answer = WORDS[cursor % len(WORDS)]
        details["question"] = word
        if session["kind"] == "standard":
            details["candidates"] = ";;;".join(candidates)
            if cursor >= len(WORDS) - 1:
                details["answer"] = str(answer)
        return Message(session_id, details)

    def submit(self, session_id: int, details: Dict[str, str]) -> Message:
        session = self.sessions[session_id]
        self.submissions.append(dict(details))
        if details.get("action") == "finish":
            scores = SCORES[session["kind"]]
            del self.sessions[session_id]
            return Message(session_id, {key: str(value) for key, value in scores.items()})
        result: Dict[str, str] = {}
        if session["kind"] == "standard":
            answer = WORDS[session["cursor"] % len(WORDS)][2]
            result["correct"] = "true" if int(details["choice"]) == answer else "false"
        step = BATCH_SIZE if session["kind"] == "recall-mass" else 1
        session["cursor"] += step
        session["answered"] += step
        return Message(session_id, result)


class FakeScoringHandler(BaseHTTPRequestHandler):
    server_version = "FakeScoring/0.1"

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass

    def do_POST(self) -> None:  # noqa: N802  (BaseHTTPRequestHandler API)
        server: FakeScoringServer = self.server  # type: ignore[assignment]
        content_length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(content_length) if content_length else b"{}"
        payload = json.loads(raw or b"{}")
        server.received.append((self.path, payload))

        if server.fail_status is not None:
            self.send_error(server.fail_status, "Scripted failure")
            return
        if server.raw_body is not None:
            self._write(server.raw_body)
            return

        backend = server.backend
        session_id = int(payload.get("session", 0))
        details = payload.get("details", {})
        if self.path == "/start":
            message = backend.start(details)
        elif self.path == "/state":
            message = backend.state(session_id)
        elif self.path == "/submit":
            message = backend.submit(session_id, details)
        else:
            self.send_error(HTTPStatus.NOT_FOUND, "Unknown endpoint")
            return
        self._write(json.dumps(message.to_json()).encode("utf-8"))

    def _write(self, body: bytes) -> None:
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class FakeScoringServer(ThreadingHTTPServer):
    """Threading server exposing the three scoring endpoints."""

    def __init__(self, address, backend: QuizBackend) -> None:
        super().__init__(address, FakeScoringHandler)
        self.backend = backend
        self.received: List[Tuple[str, Any]] = []
        self.fail_status: Optional[int] = None
        self.raw_body: Optional[bytes] = None

    @property
    def host(self) -> str:
        host, port = self.server_address[:2]
        return f"{host}:{port}"


def run_fake_server(backend: Optional[QuizBackend] = None) -> FakeScoringServer:
    server = FakeScoringServer(("127.0.0.1", 0), backend or QuizBackend())
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server

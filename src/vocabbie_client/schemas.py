"""Dataclasses describing wire messages and decoded view-states."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ProtocolError


START_PATH = "/start"
STATE_PATH = "/state"
SUBMIT_PATH = "/submit"

LIST_DELIMITER = ";;;"
CHOICES_DELIMITER = ","


def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_bool(text: str) -> bool:
    """Lenient boolean parse: only ``"true"`` (any case) is true."""

    return text.strip().lower() == "true"


def split_list(text: str) -> List[str]:
    # An empty string is an empty batch, not a single blank entry.
    if not text:
        return []
    return text.split(LIST_DELIMITER)


@dataclass(slots=True)
class Message:
    """The envelope used for every request and response."""

    session: int
    details: Dict[str, str] = field(default_factory=dict)

    def to_json(self) -> dict:
        return {
            "session": int(self.session),
            "details": {str(key): str(value) for key, value in self.details.items()},
        }

    @classmethod
    def from_json(cls, payload: Any, path: str = "") -> "Message":
        if not isinstance(payload, Mapping):
            raise ProtocolError(path, "response is not a JSON object")
        if "session" not in payload:
            raise ProtocolError(path, "response has no session", key="session")
        try:
            session = int(payload["session"])
        except (TypeError, ValueError) as exc:
            raise ProtocolError(path, f"invalid session: {exc}", key="session") from exc
        details = payload.get("details") or {}
        if not isinstance(details, Mapping):
            raise ProtocolError(path, "details is not a JSON object", key="details")
        return cls(
            session=session,
            # A JSON null counts as an absent key.
            details={
                str(key): str(value) for key, value in details.items() if value is not None
            },
        )

    def require(self, key: str, path: str = "") -> str:
        try:
            return self.details[key]
        except KeyError:
            raise ProtocolError(path, f"missing details key {key!r}", key=key) from None

    def optional_int(self, key: str, path: str = "") -> Optional[int]:
        raw = self.details.get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError as exc:
            raise ProtocolError(path, f"{key!r} is not an integer: {raw!r}", key=key) from exc


@dataclass(frozen=True, slots=True)
class ChoiceFeedback:
    """Which candidate was picked and whether the server judged it correct."""

    index: int
    correct: bool


@dataclass(frozen=True, slots=True)
class SubmitReceipt:
    correct: bool

    @classmethod
    def from_message(cls, message: Message, path: str = SUBMIT_PATH) -> "SubmitReceipt":
        return cls(correct=parse_bool(message.require("correct", path)))


@dataclass(frozen=True, slots=True)
class StandardState:
    result_available: bool
    question: str
    candidates: Tuple[str, ...]
    answer: Optional[int] = None
    choice: Optional[int] = None

    @classmethod
    def empty(cls) -> "StandardState":
        return cls(result_available=False, question="", candidates=())

    @classmethod
    def from_message(cls, message: Message, path: str = STATE_PATH) -> "StandardState":
        return cls(
            result_available=parse_bool(message.require("result_available", path)),
            question=message.require("question", path),
            candidates=tuple(split_list(message.require("candidates", path))),
            answer=message.optional_int("answer", path),
        )

    def with_choice(self, index: int) -> "StandardState":
        return replace(self, choice=index)


@dataclass(frozen=True, slots=True)
class RecallState:
    result_available: bool
    question: str

    @classmethod
    def empty(cls) -> "RecallState":
        return cls(result_available=False, question="")

    @classmethod
    def from_message(cls, message: Message, path: str = STATE_PATH) -> "RecallState":
        return cls(
            result_available=parse_bool(message.require("result_available", path)),
            question=message.require("question", path),
        )


@dataclass(frozen=True, slots=True)
class MassRecallState:
    result_available: bool
    questions: Tuple[str, ...]
    choices: Tuple[bool, ...]
    inverted: bool = False

    @classmethod
    def empty(cls) -> "MassRecallState":
        return cls(result_available=False, questions=(), choices=())

    @classmethod
    def from_message(
        cls, message: Message, inverted: bool = False, path: str = STATE_PATH
    ) -> "MassRecallState":
        questions = tuple(split_list(message.require("questions", path)))
        return cls(
            result_available=parse_bool(message.require("result_available", path)),
            questions=questions,
            choices=(False,) * len(questions),
            inverted=inverted,
        )

    def toggled(self, index: int) -> "MassRecallState":
        if not 0 <= index < len(self.choices):
            raise IndexError(f"question index {index} out of range")
        choices = list(self.choices)
        choices[index] = not choices[index]
        return replace(self, choices=tuple(choices))

    def with_inverted(self, inverted: bool) -> "MassRecallState":
        return replace(self, inverted=inverted)

    def encoded_choices(self) -> str:
        """Comma-joined booleans in question order, complemented when inverted."""

        return CHOICES_DELIMITER.join(
            encode_bool(choice != self.inverted) for choice in self.choices
        )


__all__ = [
    "START_PATH",
    "STATE_PATH",
    "SUBMIT_PATH",
    "LIST_DELIMITER",
    "CHOICES_DELIMITER",
    "encode_bool",
    "parse_bool",
    "split_list",
    "Message",
    "ChoiceFeedback",
    "SubmitReceipt",
    "StandardState",
    "RecallState",
    "MassRecallState",
]

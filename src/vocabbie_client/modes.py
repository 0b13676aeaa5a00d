"""Quiz-mode state machines.

Every mode follows the same protocol: ``launch`` opens a session and fetches
the first ``/state``, the mode-specific interactions loop over
``/submit`` + ``/state``, and ``finish`` turns the final ``/submit`` reply
into a :class:`~vocabbie_client.results.Results`. Subclasses only supply the
view-state decoder and their interactions.

At most one chain of suspend points runs per machine. Interactions that
arrive while a chain is in flight are rejected and return ``False``.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type

from .config import Settings
from .errors import NoActiveSession, VocabbieError
from .navigation import Page
from .results import Results, aggregate_results
from .schemas import (
    STATE_PATH,
    SUBMIT_PATH,
    ChoiceFeedback,
    MassRecallState,
    Message,
    RecallState,
    StandardState,
    SubmitReceipt,
    encode_bool,
)
from .session import SessionRegistry
from .transport import Transport


logger = logging.getLogger(__name__)

Emit = Callable[[str, Any], None]


class QuizMode(Enum):
    STANDARD = ("standard", Page.STANDARD)
    RECALL = ("recall", Page.RECALL)
    RECALL_TYV = ("recall-tyv", Page.RECALL)
    MASS_RECALL = ("recall-mass", Page.MASS_RECALL)

    def __init__(self, kind: str, page: Page) -> None:
        self.kind = kind
        self.page = page

    @classmethod
    def from_kind(cls, kind: str) -> "QuizMode":
        for mode in cls:
            if mode.kind == kind:
                return mode
        raise ValueError(f"Unknown quiz kind: {kind}")


class Phase(Enum):
    NO_SESSION = "no-session"
    ACTIVE = "active"
    FINISHED = "finished"


def _ignore(event: str, payload: Any) -> None:
    pass


class ModeMachine:
    """Shared launch/finish logic and the at-most-one-in-flight guard."""

    def __init__(
        self,
        mode: QuizMode,
        transport: Transport,
        registry: SessionRegistry,
        settings: Optional[Settings] = None,
        emit: Optional[Emit] = None,
    ) -> None:
        self.mode = mode
        self.transport = transport
        self.registry = registry
        self.settings = settings or Settings.load()
        self.phase = Phase.NO_SESSION
        self.state = self.empty_state()
        self._emit = emit or _ignore
        self._busy = False

    # ------------------------------------------------------------------
    # Hooks for subclasses

    def empty_state(self) -> Any:
        raise NotImplementedError

    def decode_state(self, message: Message) -> Any:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Shared protocol

    @property
    def busy(self) -> bool:
        return self._busy

    async def launch(self) -> int:
        """Open a session and load the first question.

        Raises :class:`~vocabbie_client.errors.SessionStartFailed` when the
        server refuses; the machine then stays in ``NO_SESSION``.
        """

        if self.phase is not Phase.NO_SESSION:
            raise RuntimeError(f"{self.mode.kind} machine was already launched")
        self._busy = True
        try:
            session_id = await self.registry.start_session(self.mode.kind)
            await self._refresh()
        finally:
            self._busy = False
        self.phase = Phase.ACTIVE
        return session_id

    async def finish(self) -> Optional[Results]:
        self._require_active()
        if not self._claim("finish"):
            return None
        try:
            session_id = self.registry.require_session()
            reply = await self._submit(action="finish")
        finally:
            self._busy = False
        results = aggregate_results(reply.details)
        logger.info("Session %s finished.", session_id)
        self.phase = Phase.FINISHED
        self.registry.clear()
        return results

    async def refresh(self) -> bool:
        """Re-read ``/state`` without submitting; local-only fields reset."""

        self._require_active()
        if not self._claim("refresh"):
            return False
        try:
            await self._refresh()
        finally:
            self._busy = False
        return True

    # ------------------------------------------------------------------
    # Helpers

    def _require_active(self) -> None:
        if self.phase is not Phase.ACTIVE:
            raise NoActiveSession(f"{self.mode.kind} session is {self.phase.value}")

    def _claim(self, intent: str) -> bool:
        if self._busy:
            logger.debug("Rejecting %s: a %s request is in flight", intent, self.mode.kind)
            return False
        self._busy = True
        return True

    def _set_state(self, state: Any) -> None:
        self.state = state
        self._emit("state", state)

    async def _submit(self, **details: str) -> Message:
        session_id = self.registry.require_session()
        return await self.transport.send(SUBMIT_PATH, Message(session_id, dict(details)))

    async def _refresh(self) -> None:
        session_id = self.registry.require_session()
        reply = await self.transport.send(STATE_PATH, Message(session_id, {}))
        self._set_state(self.decode_state(reply))

    @staticmethod
    async def _dwell(milliseconds: int) -> None:
        await asyncio.sleep(max(milliseconds, 0) / 1000)


class StandardMachine(ModeMachine):
    """Multiple choice: submit, flash feedback, settle, fetch the next question."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.feedback: Optional[ChoiceFeedback] = None

    def empty_state(self) -> StandardState:
        return StandardState.empty()

    def decode_state(self, message: Message) -> StandardState:
        return StandardState.from_message(message)

    async def choose(self, index: int) -> bool:
        self._require_active()
        if self.state.choice is not None:
            logger.debug("Ignoring choice %s: choice %s is pending", index, self.state.choice)
            return False
        if not 0 <= index < len(self.state.candidates):
            raise IndexError(f"candidate index {index} out of range")
        if not self._claim("choose"):
            return False
        before = self.state
        self._set_state(before.with_choice(index))
        try:
            reply = await self._submit(action="choose", choice=str(index))
            receipt = SubmitReceipt.from_message(reply)
            self._set_feedback(ChoiceFeedback(index, receipt.correct))
            await self._dwell(self.settings.feedback_dwell_ms)
            self._set_feedback(None)
            await self._dwell(self.settings.settle_ms)
            await self._refresh()
        except VocabbieError:
            self._set_feedback(None)
            self._set_state(before)
            raise
        finally:
            self._busy = False
        return True

    def _set_feedback(self, feedback: Optional[ChoiceFeedback]) -> None:
        if feedback == self.feedback:
            return
        self.feedback = feedback
        self._emit("feedback", feedback)


class RecallMachine(ModeMachine):
    """Binary recall, shared by the plain and Test-Your-Vocab kinds."""

    def empty_state(self) -> RecallState:
        return RecallState.empty()

    def decode_state(self, message: Message) -> RecallState:
        return RecallState.from_message(message)

    async def recall(self, recalled: bool) -> bool:
        self._require_active()
        if not self._claim("recall"):
            return False
        try:
            await self._submit(action="choose", recall=encode_bool(recalled))
            await self._refresh()
        finally:
            self._busy = False
        return True


class MassRecallMachine(ModeMachine):
    """Batch recall: local toggles, one submission per batch."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.curtain = False

    def empty_state(self) -> MassRecallState:
        return MassRecallState.empty()

    def decode_state(self, message: Message) -> MassRecallState:
        return MassRecallState.from_message(message, inverted=self.state.inverted)

    def toggle(self, index: int) -> bool:
        self._require_active()
        if self._busy:
            logger.debug("Ignoring toggle %s while a batch is in flight", index)
            return False
        self._set_state(self.state.toggled(index))
        return True

    def toggle_invert(self) -> bool:
        self._require_active()
        if self._busy:
            logger.debug("Ignoring invert toggle while a batch is in flight")
            return False
        self._set_state(self.state.with_inverted(not self.state.inverted))
        return True

    async def continue_batch(self) -> bool:
        self._require_active()
        if not self._claim("continue"):
            return False
        try:
            self._set_curtain(True)
            await self._dwell(self.settings.curtain_ms)
            await self._submit(action="choose", choices=self.state.encoded_choices())
            await self._refresh()
            self._set_curtain(False)
            await self._dwell(self.settings.curtain_ms)
        finally:
            self._set_curtain(False)
            self._busy = False
        return True

    def _set_curtain(self, raised: bool) -> None:
        if raised == self.curtain:
            return
        self.curtain = raised
        self._emit("curtain", raised)


MACHINES: Dict[QuizMode, Type[ModeMachine]] = {
    QuizMode.STANDARD: StandardMachine,
    QuizMode.RECALL: RecallMachine,
    QuizMode.RECALL_TYV: RecallMachine,
    QuizMode.MASS_RECALL: MassRecallMachine,
}


def build_machine(
    mode: QuizMode,
    transport: Transport,
    registry: SessionRegistry,
    settings: Optional[Settings] = None,
    emit: Optional[Emit] = None,
) -> ModeMachine:
    return MACHINES[mode](mode, transport, registry, settings, emit)


__all__ = [
    "QuizMode",
    "Phase",
    "ModeMachine",
    "StandardMachine",
    "RecallMachine",
    "MassRecallMachine",
    "MACHINES",
    "build_machine",
]

"""Single owner of client state, injected into the presentation layer."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Type, TypeVar

from .config import Settings
from .errors import NoActiveSession, SessionStartFailed
from .modes import (
    MassRecallMachine,
    ModeMachine,
    Phase,
    QuizMode,
    RecallMachine,
    StandardMachine,
    build_machine,
)
from .navigation import Navigator, Page
from .results import Results
from .session import SessionRegistry
from .transport import Transport


logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]
M = TypeVar("M", bound=ModeMachine)


class QuizController:
    """Holds the transport, session registry, navigator and active mode.

    Presentation code dispatches intents through the public coroutines and
    observes changes with :meth:`subscribe`. Listeners receive an event name
    (``page``, ``state``, ``feedback``, ``curtain`` or ``results``) and its
    payload.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self.settings = settings or Settings.load()
        self.transport = transport or Transport(self.settings)
        self.registry = SessionRegistry(self.transport)
        self.navigator = Navigator(on_change=lambda page: self._emit("page", page))
        self.machine: Optional[ModeMachine] = None
        self.results: Optional[Results] = None
        self.last_error: Optional[SessionStartFailed] = None
        self._listeners: List[Listener] = []
        self._launching = False

    # ------------------------------------------------------------------
    # Observation

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    @property
    def page(self) -> Page:
        return self.navigator.page

    @property
    def mode(self) -> Optional[QuizMode]:
        return self.machine.mode if self.machine is not None else None

    @property
    def busy(self) -> bool:
        """True while a launch or the active machine's chain is suspended."""

        return self._launching or (self.machine is not None and self.machine.busy)

    @property
    def state(self) -> Any:
        return self.machine.state if self.machine is not None else None

    # ------------------------------------------------------------------
    # Lifecycle intents

    async def launch(self, mode: QuizMode) -> bool:
        """Start a ``mode`` session; ``False`` when the server refuses it."""

        if self.busy:
            logger.debug("Rejecting launch of %s while a request is in flight", mode.kind)
            return False
        self._launching = True
        machine = build_machine(mode, self.transport, self.registry, self.settings, self._emit)
        try:
            await machine.launch()
        except SessionStartFailed as exc:
            self.last_error = exc
            return False
        finally:
            self._launching = False
        self.last_error = None
        self.machine = machine
        self.navigator.session_started(mode.page)
        return True

    async def finish(self) -> Optional[Results]:
        machine = self._active(ModeMachine)
        results = await machine.finish()
        if results is None:
            return None
        self.results = results
        self._emit("results", results)
        self.navigator.session_finished()
        return results

    def go_to_greeting(self) -> bool:
        """Drop the session and show the greeting; refused mid-request."""

        if self.busy:
            logger.debug("Rejecting reset while a request is in flight")
            return False
        self.registry.clear()
        self.machine = None
        self.navigator.reset()
        return True

    # ------------------------------------------------------------------
    # Mode intents

    async def choose(self, index: int) -> bool:
        return await self._active(StandardMachine).choose(index)

    async def recall(self, recalled: bool) -> bool:
        return await self._active(RecallMachine).recall(recalled)

    def toggle(self, index: int) -> bool:
        return self._active(MassRecallMachine).toggle(index)

    def toggle_invert(self) -> bool:
        return self._active(MassRecallMachine).toggle_invert()

    async def continue_batch(self) -> bool:
        return await self._active(MassRecallMachine).continue_batch()

    def _active(self, kind: Type[M]) -> M:
        machine = self.machine
        if machine is None or machine.phase is not Phase.ACTIVE:
            raise NoActiveSession("No active quiz session")
        if not isinstance(machine, kind):
            raise ValueError(f"{machine.mode.kind} sessions do not accept this intent")
        return machine


__all__ = ["QuizController"]

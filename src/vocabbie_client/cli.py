"""Line-oriented console front-end for the quiz client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Callable, Optional, TextIO

from .config import Settings
from .controller import QuizController
from .errors import VocabbieError
from .modes import QuizMode
from .navigation import Page
from .results import Results
from .schemas import ChoiceFeedback, MassRecallState, RecallState, StandardState


SUBTITLES = {
    Page.GREETING: "Your simple vocabulary quiz.",
    Page.STANDARD: "What does it mean?",
    Page.RECALL: "Do you recall it?",
    Page.MASS_RECALL: "Do you recall them?",
    Page.RESULT: "See your feat!",
}

MENU = (
    ("1", "Standard word quiz", QuizMode.STANDARD),
    ("2", "Binary recall test", QuizMode.RECALL),
    ("3", "Test-Your-Vocabulary", QuizMode.RECALL_TYV),
    ("4", "Skimming recall test", QuizMode.MASS_RECALL),
)

HELP = {
    Page.GREETING: "pick 1-4, q to quit",
    Page.STANDARD: "number to choose, f to finish, b for greeting",
    Page.RECALL: "y / n, f to finish, b for greeting",
    Page.MASS_RECALL: "numbers to toggle, i to invert, c to continue, f to finish, b for greeting",
    Page.RESULT: "b for greeting, q to quit",
}


class ConsoleView:
    """Renders controller events as plain text."""

    def __init__(self, controller: QuizController, out: TextIO) -> None:
        self.controller = controller
        self.out = out

    def __call__(self, event: str, payload: Any) -> None:
        if event == "page":
            self.render_page(payload)
        elif event == "state" and self.controller.page is not Page.GREETING:
            self.render_state(payload)
        elif event == "feedback" and payload is not None:
            self.render_feedback(payload)
        elif event == "results":
            self.render_results(payload)

    def write(self, text: str = "") -> None:
        print(text, file=self.out)

    def render_page(self, page: Page) -> None:
        self.write()
        self.write(f"It's Vocabbie... {SUBTITLES[page]}")
        if page is Page.GREETING:
            for key, label, _ in MENU:
                self.write(f"  [{key}] {label}")
        elif page is Page.RESULT and self.controller.results is not None:
            self.render_results(self.controller.results)
        elif self.controller.state is not None:
            self.render_state(self.controller.state)

    def render_state(self, state: Any) -> None:
        if isinstance(state, StandardState):
            if state.choice is not None:
                return
            self.write(f"\n  {state.question}")
            for i, candidate in enumerate(state.candidates):
                marker = " ✦" if state.answer == i else ""
                self.write(f"    [{i}] {candidate}{marker}")
        elif isinstance(state, RecallState):
            self.write(f"\n  {state.question}")
        elif isinstance(state, MassRecallState):
            box = "[x]" if state.inverted else "[ ]"
            self.write(f"\n  {box} I choose what I don't know!")
            if not state.questions:
                self.write("  (no more words)")
            for i, (question, chosen) in enumerate(zip(state.questions, state.choices)):
                mark = "*" if chosen else " "
                self.write(f"   {mark}[{i}] {question}")
        if getattr(state, "result_available", False):
            self.write("  Enough! Results are available (f).")

    def render_feedback(self, feedback: ChoiceFeedback) -> None:
        verdict = "correct" if feedback.correct else "wrong"
        self.write(f"  [{feedback.index}] is {verdict}")

    def render_results(self, results: Results) -> None:
        if self.controller.page is not Page.RESULT:
            return
        for _, abbr, description, value in results.entries():
            self.write(f"  {abbr:<8}{value:>8}   {description}")


async def dispatch(controller: QuizController, line: str, out: Optional[TextIO] = None) -> bool:
    """Apply one command line; return ``False`` to quit."""

    out = out or sys.stdout
    command = line.strip().lower()
    page = controller.page
    if command == "q" and page in (Page.GREETING, Page.RESULT):
        return False
    if command == "b" and page is not Page.GREETING:
        if not controller.go_to_greeting():
            print("Still waiting for the server.", file=out)
        return True
    if page is Page.GREETING:
        for key, _, mode in MENU:
            if command == key:
                if not await controller.launch(mode):
                    print("Failed to start a session.", file=out)
                return True
    elif command == "f" and page in (Page.STANDARD, Page.RECALL, Page.MASS_RECALL):
        if controller.state.result_available:
            await controller.finish()
        else:
            print("Results are not available yet.", file=out)
        return True
    elif page is Page.STANDARD and command.isdigit():
        await controller.choose(int(command))
        return True
    elif page is Page.RECALL and command in ("y", "n"):
        await controller.recall(command == "y")
        return True
    elif page is Page.MASS_RECALL:
        if command == "i":
            controller.toggle_invert()
            return True
        if command == "c":
            await controller.continue_batch()
            return True
        indices = command.replace(",", " ").split()
        if indices and all(part.isdigit() for part in indices):
            for part in indices:
                controller.toggle(int(part))
            return True
    print(f"? {HELP[page]}", file=out)
    return True


async def run_console(
    controller: QuizController,
    read_line: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> None:
    read_line = read_line or input
    view = ConsoleView(controller, out or sys.stdout)
    controller.subscribe(view)
    view.render_page(controller.page)
    try:
        while True:
            try:
                line = await asyncio.to_thread(read_line, "> ")
            except EOFError:
                break
            try:
                if not await dispatch(controller, line, view.out):
                    break
            except (VocabbieError, IndexError) as exc:
                view.write(f"Error: {exc}")
    finally:
        controller.unsubscribe(view)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Play a Vocabbie quiz in the terminal")
    parser.add_argument("--host", help="Scoring server host:port (default: localhost:8000)")
    parser.add_argument("--scheme", help="URL scheme (default: http)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and transitions")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.load()
    if args.host:
        settings.host = args.host
    if args.scheme:
        settings.scheme = args.scheme
    if args.timeout is not None:
        settings.request_timeout = args.timeout

    print(f"Playing against {settings.base_url}")
    try:
        asyncio.run(run_console(QuizController(settings=settings)))
    except KeyboardInterrupt:
        print("Shutting down...")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()

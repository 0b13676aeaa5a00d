"""Top-level page state driven by session lifecycle events."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class Page(Enum):
    GREETING = "greeting"
    STANDARD = "standard"
    RECALL = "recall"
    MASS_RECALL = "mass-recall"
    RESULT = "result"


GAMEPLAY_PAGES = frozenset({Page.STANDARD, Page.RECALL, Page.MASS_RECALL})


class Navigator:
    """Current page holder.

    Only three lifecycle events move the page: a successful launch, a
    completed finish, and the user going back to the greeting.
    """

    def __init__(self, on_change: Optional[Callable[[Page], None]] = None) -> None:
        self._page = Page.GREETING
        self._on_change = on_change

    @property
    def page(self) -> Page:
        return self._page

    def session_started(self, page: Page) -> None:
        if page not in GAMEPLAY_PAGES:
            raise ValueError(f"{page.name} is not a gameplay page")
        self._go(page)

    def session_finished(self) -> None:
        self._go(Page.RESULT)

    def reset(self) -> None:
        self._go(Page.GREETING)

    def _go(self, page: Page) -> None:
        if page is self._page:
            return
        logger.info("Page %s -> %s", self._page.name, page.name)
        self._page = page
        if self._on_change is not None:
            self._on_change(page)


__all__ = ["Page", "GAMEPLAY_PAGES", "Navigator"]

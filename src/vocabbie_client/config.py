"""Configuration helpers for the Vocabbie quiz client."""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_HOST = "localhost:8000"
DEFAULT_SCHEME = "http"
DEFAULT_TIMEOUT = 10.0
DEFAULT_FEEDBACK_DWELL_MS = 500
DEFAULT_SETTLE_MS = 250
DEFAULT_CURTAIN_MS = 100


@dataclass(slots=True)
class Settings:
    """Runtime settings with environment overrides.

    The ``*_ms`` values are the visual dwell timings between suspend points;
    they are plain delays and are never cancelled.
    """

    host: str = DEFAULT_HOST
    scheme: str = DEFAULT_SCHEME
    request_timeout: float = DEFAULT_TIMEOUT
    feedback_dwell_ms: int = DEFAULT_FEEDBACK_DWELL_MS
    settle_ms: int = DEFAULT_SETTLE_MS
    curtain_ms: int = DEFAULT_CURTAIN_MS

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    @classmethod
    def load(cls) -> "Settings":
        """Construct settings from environment variables when available."""

        return cls(
            host=os.environ.get("VOCABBIE_HOST", DEFAULT_HOST),
            scheme=os.environ.get("VOCABBIE_SCHEME", DEFAULT_SCHEME),
            request_timeout=float(
                os.environ.get("VOCABBIE_TIMEOUT", str(DEFAULT_TIMEOUT))
            ),
            feedback_dwell_ms=int(
                os.environ.get(
                    "VOCABBIE_FEEDBACK_DWELL_MS", str(DEFAULT_FEEDBACK_DWELL_MS)
                )
            ),
            settle_ms=int(os.environ.get("VOCABBIE_SETTLE_MS", str(DEFAULT_SETTLE_MS))),
            curtain_ms=int(
                os.environ.get("VOCABBIE_CURTAIN_MS", str(DEFAULT_CURTAIN_MS))
            ),
        )


__all__ = ["Settings"]

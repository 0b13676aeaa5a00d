"""Final score records built from a ``finish`` reply."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Tuple

from .errors import ProtocolError
from .schemas import SUBMIT_PATH


SCORE_LABELS: Tuple[Tuple[str, str, str], ...] = (
    ("uls", "UniLS", "Uniform Leveled Scaling"),
    ("rfwls", "ReFLS", "Reciprocal Frequency Weighted Leveled Scaling"),
    ("heu", "ReHEU", "Reciprocal Heuristic Estimation"),
    ("tyv", "ML-TYV", "Machine learning based mimicry of Test-Your-Vocab scoring"),
)


@dataclass(frozen=True, slots=True)
class Results:
    """Scores per method; ``None`` means the method did not run."""

    uls: Optional[int] = None
    rfwls: Optional[int] = None
    heu: Optional[int] = None
    tyv: Optional[int] = None

    def entries(self) -> Iterator[Tuple[str, str, str, int]]:
        """Yield ``(field, abbr, description, value)`` for populated scores."""

        for name, abbr, description in SCORE_LABELS:
            value = getattr(self, name)
            if value is not None:
                yield name, abbr, description, value


def _score(details: Mapping[str, str], key: str) -> Optional[int]:
    raw = details.get(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ProtocolError(SUBMIT_PATH, f"{key!r} is not an integer: {raw!r}", key=key) from exc


def aggregate_results(details: Mapping[str, str]) -> Results:
    """Build a :class:`Results` from whichever score keys are present."""

    return Results(**{name: _score(details, name) for name, _, _ in SCORE_LABELS})


__all__ = ["SCORE_LABELS", "Results", "aggregate_results"]

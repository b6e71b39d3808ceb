"""18-hole score grid with per-cell input validation and nine-hole aggregates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple

HOLES = 18
NINE = 9
DEFAULT_PAR = 72
UNSET_DISPLAY = "-"

_SCORE_INPUT_RE = re.compile(r"[0-9]*")


def is_valid_score_input(raw_input: object) -> bool:
    """Empty or ASCII digits only; anything else is ignored by the grid."""

    return isinstance(raw_input, str) and _SCORE_INPUT_RE.fullmatch(raw_input) is not None


@dataclass(frozen=True)
class Aggregate:
    front_nine: int
    back_nine: int
    total: int

    def to_dict(self) -> dict[str, int]:
        return {
            "frontNine": self.front_nine,
            "backNine": self.back_nine,
            "total": self.total,
        }


class ScoreGrid:
    """Immutable 18-hole scorecard; 0 means the hole has not been entered.

    Edits return a new grid. A rejected edit returns the same instance so
    callers can compare identity to tell whether anything changed.
    """

    __slots__ = ("_scores",)

    def __init__(self, scores: Tuple[int, ...]):
        self._scores = scores

    @classmethod
    def empty(cls) -> "ScoreGrid":
        return cls((0,) * HOLES)

    @classmethod
    def from_scores(cls, values: Iterable[int]) -> "ScoreGrid":
        scores = tuple(values)
        if len(scores) != HOLES:
            raise ValueError(f"scorecard must have {HOLES} holes, got {len(scores)}")
        for value in scores:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"invalid hole score: {value!r}")
        return cls(scores)

    @property
    def scores(self) -> Tuple[int, ...]:
        return self._scores

    def to_list(self) -> List[int]:
        return list(self._scores)

    def set_score(self, hole_index: int, raw_input: str) -> "ScoreGrid":
        if not 0 <= hole_index < HOLES:
            raise IndexError(f"hole index out of range: {hole_index}")
        if not is_valid_score_input(raw_input):
            return self
        value = int(raw_input) if raw_input else 0
        if self._scores[hole_index] == value:
            return self
        updated = list(self._scores)
        updated[hole_index] = value
        return ScoreGrid(tuple(updated))

    @property
    def front_nine(self) -> int:
        return sum(self._scores[:NINE])

    @property
    def back_nine(self) -> int:
        return sum(self._scores[NINE:HOLES])

    @property
    def total(self) -> int:
        return self.front_nine + self.back_nine

    def aggregate(self) -> Aggregate:
        front = self.front_nine
        back = self.back_nine
        return Aggregate(front_nine=front, back_nine=back, total=front + back)

    @property
    def has_scores(self) -> bool:
        return any(value > 0 for value in self._scores)

    def display(self, hole_index: int) -> str:
        value = self._scores[hole_index]
        return str(value) if value else UNSET_DISPLAY

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScoreGrid):
            return NotImplemented
        return self._scores == other._scores

    def __hash__(self) -> int:
        return hash(self._scores)

    def __repr__(self) -> str:
        return f"ScoreGrid({list(self._scores)!r})"


def format_to_par(total: int, par: int = DEFAULT_PAR) -> str:
    diff = total - par
    if diff == 0:
        return "E"
    prefix = "+" if diff > 0 else ""
    return f"{prefix}{diff}"


__all__ = [
    "HOLES",
    "NINE",
    "DEFAULT_PAR",
    "UNSET_DISPLAY",
    "Aggregate",
    "ScoreGrid",
    "format_to_par",
    "is_valid_score_input",
]

"""
Normalized Answer Variants

One tagged variant per answer shape. Downstream layers only ever see these;
raw payloads are interpreted exactly once, in normalize.py.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple, Union


@dataclass(frozen=True)
class Choice:
    value: str
    kind: str = "choice"


@dataclass(frozen=True)
class MultiChoice:
    values: FrozenSet[str]
    kind: str = "multi_choice"


@dataclass(frozen=True)
class Text:
    value: str
    kind: str = "text"

    @property
    def is_empty(self) -> bool:
        return not self.value.strip()


@dataclass(frozen=True)
class Scale:
    value: float
    kind: str = "scale"


@dataclass(frozen=True)
class Rating:
    """Trader rating, integer in [1, 10]."""
    value: int
    kind: str = "rating"


@dataclass(frozen=True)
class Files:
    refs: Tuple[str, ...]
    kind: str = "file"


NormalizedAnswer = Union[Choice, MultiChoice, Text, Scale, Rating, Files]

RATING_MIN = 1
RATING_MAX = 10

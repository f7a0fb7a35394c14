from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Sequence

HEX_COLOR_LENGTH = 7
HEX_BASE = 16


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        text = text.strip()
        if len(text) != HEX_COLOR_LENGTH or not text.startswith("#"):
            raise ValueError(f"Invalid color '{text}', expected #rrggbb")
        return cls(int(text[1:3], HEX_BASE), int(text[3:5], HEX_BASE), int(text[5:7], HEX_BASE))

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)
DEFAULT_COLOR_NAME = "black"


@dataclass(frozen=True)
class Clue:
    value: int = 0
    color: Color = BLACK

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Clue value must be non-negative, got {self.value}")


ClueSequence = List[Clue]


def zero_clues() -> ClueSequence:
    return [Clue(0)]


def active_clues(clues: Iterable[Clue]) -> ClueSequence:
    """Clues that produce a run; a line with none of these is entirely empty."""
    return [clue for clue in clues if clue.value > 0]


def required_gap(previous: Clue, current: Clue) -> int:
    return 1 if previous.color == current.color else 0


def minimum_span(clues: Sequence[Clue]) -> int:
    clues = active_clues(clues)
    span = sum(clue.value for clue in clues)
    for previous, current in zip(clues, clues[1:]):
        span += required_gap(previous, current)
    return span


def monochrome(values: Iterable[int], color: Color = BLACK) -> ClueSequence:
    clues = [Clue(int(v), color) for v in values]
    return clues or zero_clues()

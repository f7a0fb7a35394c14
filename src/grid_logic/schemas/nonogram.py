from typing import Dict, List, Union

import msgspec

# A clue is either a bare run length (default color) or [length, color name]
ClueEntry = Union[int, List[Union[int, str]]]


class PuzzleDocument(msgspec.Struct, rename="lower", forbid_unknown_fields=True):
    width: int
    height: int
    row_clues: List[List[ClueEntry]]
    col_clues: List[List[ClueEntry]]
    title: str = ""
    author: str = ""
    palette: Dict[str, str] = msgspec.field(default_factory=dict)
    grid: List[str] = msgspec.field(default_factory=list)


class NonogramHints(msgspec.Struct):
    row_hints: List[List[int]]
    col_hints: List[List[int]]

class NonogramRecord(msgspec.Struct, rename="lower"):
    size: int
    initialization: List[List[str]]
    hints: NonogramHints
    solution: List[List[str]] = msgspec.field(default_factory=list)
    id: str = "unknown"

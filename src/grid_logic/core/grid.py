import enum
from dataclasses import dataclass
from typing import Iterator, List

from grid_logic.core.clue import BLACK, Clue, ClueSequence, Color, zero_clues


class CellState(enum.Enum):
    BLANK = enum.auto()
    FILLED = enum.auto()
    MARKED_EMPTY = enum.auto()


@dataclass
class Cell:
    state: CellState = CellState.BLANK
    color: Color = BLACK

    @property
    def is_filled(self) -> bool:
        return self.state == CellState.FILLED

    def fill(self, color: Color = BLACK):
        self.state = CellState.FILLED
        self.color = color

    def mark_empty(self):
        self.state = CellState.MARKED_EMPTY
        self.color = BLACK

    def clear(self):
        self.state = CellState.BLANK
        self.color = BLACK


class LineView:
    """
    Live view of one row or column of a Grid.

    Cells are addressed through an offset and a stride into the grid's
    row-major buffer, so a row view and a column view crossing the same
    position see the same Cell object.
    """

    def __init__(self, grid: "Grid", offset: int, stride: int, length: int):
        self._grid = grid
        self._offset = offset
        self._stride = stride
        self._length = length

    def _index(self, position: int) -> int:
        if position < 0:
            position += self._length
        if not 0 <= position < self._length:
            raise IndexError(f"Line position {position} out of range for length {self._length}")
        return self._offset + position * self._stride

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, position: int) -> Cell:
        return self._grid._cells[self._index(position)]

    def __setitem__(self, position: int, cell: Cell):
        target = self._grid._cells[self._index(position)]
        target.state, target.color = cell.state, cell.color

    def __iter__(self) -> Iterator[Cell]:
        for position in range(self._length):
            yield self._grid._cells[self._offset + position * self._stride]

    def states(self) -> List[CellState]:
        return [cell.state for cell in self]

    def __repr__(self):
        symbols = {CellState.BLANK: ".", CellState.FILLED: "#", CellState.MARKED_EMPTY: "x"}
        return f"LineView({''.join(symbols[s] for s in self.states())})"


class Grid:
    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[Cell] = [Cell() for _ in range(width * height)]

    def offset(self, col: int, row: int) -> int:
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"Cell ({col}, {row}) outside {self.width}x{self.height} grid")
        return row * self.width + col

    def at(self, col: int, row: int) -> Cell:
        return self._cells[self.offset(col, row)]

    def row(self, row: int) -> LineView:
        self.offset(0, row)
        return LineView(self, row * self.width, 1, self.width)

    def col(self, col: int) -> LineView:
        self.offset(col, 0)
        return LineView(self, col, self.width, self.height)

    def rows(self) -> List[LineView]:
        return [self.row(y) for y in range(self.height)]

    def cols(self) -> List[LineView]:
        return [self.col(x) for x in range(self.width)]

    def clear(self):
        for cell in self._cells:
            cell.clear()

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)


def line_clues(cells) -> ClueSequence:
    """Clue list that the filled cells of a line currently spell out."""
    clues: ClueSequence = []
    run_length = 0
    run_color = BLACK
    for cell in cells:
        if cell.state == CellState.FILLED:
            if run_length and cell.color == run_color:
                run_length += 1
                continue
            if run_length:
                clues.append(Clue(run_length, run_color))
            run_length, run_color = 1, cell.color
        elif run_length:
            clues.append(Clue(run_length, run_color))
            run_length = 0
    if run_length:
        clues.append(Clue(run_length, run_color))

    return clues or zero_clues()

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from grid_logic.core.blocks import ForcedCell, LineResult, LineStatus, solve_line
from grid_logic.core.clue import BLACK, DEFAULT_COLOR_NAME, ClueSequence, Color, active_clues, zero_clues
from grid_logic.core.grid import Cell, CellState, Grid, LineView, line_clues


class PuzzleStructureError(ValueError):
    pass


@dataclass
class FailingLines:
    rows: List[int] = field(default_factory=list)
    cols: List[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rows or self.cols)


def is_line_solved(line: Sequence[Cell], clues: ClueSequence) -> bool:
    """
    Verify a line's current cells against its clues.

    Each clue must match exactly `value` consecutive filled cells of its
    color, found by scanning past non-filled cells. A run that keeps going
    in the same color, runs off the end of the line, or leftover filled
    cells after the last clue all fail the check.
    """
    size = len(line)
    clues = active_clues(clues)

    pos = 0
    for clue in clues:
        while pos < size and line[pos].state != CellState.FILLED:
            pos += 1

        if pos + clue.value > size:
            return False
        for i in range(clue.value):
            cell = line[pos + i]
            if cell.state != CellState.FILLED or cell.color != clue.color:
                return False
        pos += clue.value

        if pos < size and line[pos].state == CellState.FILLED and line[pos].color == clue.color:
            return False

    return all(line[i].state != CellState.FILLED for i in range(pos, size))


class Puzzle:
    def __init__(
        self,
        width: int,
        height: int,
        row_clues: Optional[List[ClueSequence]] = None,
        col_clues: Optional[List[ClueSequence]] = None,
        title: str = "",
        author: str = "",
        palette: Optional[Dict[str, Color]] = None,
    ):
        if width <= 0 or height <= 0:
            raise PuzzleStructureError(f"Puzzle dimensions must be positive, got {width}x{height}")

        self.grid = Grid(width, height)
        self.row_clues_list = row_clues if row_clues is not None else [zero_clues() for _ in range(height)]
        self.col_clues_list = col_clues if col_clues is not None else [zero_clues() for _ in range(width)]
        self.title = title
        self.author = author
        self.palette = palette if palette is not None else {DEFAULT_COLOR_NAME: BLACK}

        if len(self.row_clues_list) != height:
            raise PuzzleStructureError(
                f"Expected {height} row clue sequences, got {len(self.row_clues_list)}"
            )
        if len(self.col_clues_list) != width:
            raise PuzzleStructureError(
                f"Expected {width} column clue sequences, got {len(self.col_clues_list)}"
            )

    @classmethod
    def from_solution(cls, picture: List[List[Optional[Color]]], **metadata) -> "Puzzle":
        """Puzzle whose clues describe `picture` (None for an empty cell); the grid starts blank."""
        height = len(picture)
        width = len(picture[0]) if height else 0
        puzzle = cls(width, height, **metadata)
        for row, colors in enumerate(picture):
            if len(colors) != width:
                raise PuzzleStructureError(f"Row {row} has {len(colors)} cells, expected {width}")
            for col, color in enumerate(colors):
                if color is not None:
                    puzzle.mark_cell(col, row, color)
        puzzle.derive_clues()
        puzzle.clear()
        return puzzle

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def row_clues(self, row: int) -> ClueSequence:
        return self.row_clues_list[row]

    def col_clues(self, col: int) -> ClueSequence:
        return self.col_clues_list[col]

    def row(self, row: int) -> LineView:
        return self.grid.row(row)

    def col(self, col: int) -> LineView:
        return self.grid.col(col)

    def cell(self, col: int, row: int) -> Cell:
        return self.grid.at(col, row)

    def __getitem__(self, col: int) -> LineView:
        return self.grid.col(col)

    def mark_cell(self, col: int, row: int, color: Color = BLACK):
        self.grid.at(col, row).fill(color)

    def mark_empty(self, col: int, row: int):
        self.grid.at(col, row).mark_empty()

    def clear_cell(self, col: int, row: int):
        self.grid.at(col, row).clear()

    def clear(self):
        self.grid.clear()

    def attempt_mark(self, col: int, row: int, color: Color = BLACK) -> bool:
        """Fill a cell unless doing so makes its row or column contradictory."""
        cell = self.grid.at(col, row)
        previous = Cell(cell.state, cell.color)
        cell.fill(color)

        if self.row_status(row) == LineStatus.CONTRADICTORY or self.col_status(col) == LineStatus.CONTRADICTORY:
            cell.state, cell.color = previous.state, previous.color
            return False
        return True

    def derive_clues(self):
        self.row_clues_list = [line_clues(line) for line in self.grid.rows()]
        self.col_clues_list = [line_clues(line) for line in self.grid.cols()]

    def is_row_solved(self, row: int) -> bool:
        return is_line_solved(self.grid.row(row), self.row_clues(row))

    def is_col_solved(self, col: int) -> bool:
        return is_line_solved(self.grid.col(col), self.col_clues(col))

    def is_solved(self) -> bool:
        return all(self.is_col_solved(x) for x in range(self.width)) and all(
            self.is_row_solved(y) for y in range(self.height)
        )

    def failing_lines(self) -> FailingLines:
        return FailingLines(
            rows=[y for y in range(self.height) if not self.is_row_solved(y)],
            cols=[x for x in range(self.width) if not self.is_col_solved(x)],
        )

    def solve_row(self, row: int) -> LineResult:
        return solve_line(self.grid.row(row), self.row_clues(row))

    def solve_col(self, col: int) -> LineResult:
        return solve_line(self.grid.col(col), self.col_clues(col))

    def row_status(self, row: int) -> LineStatus:
        return self.solve_row(row).status

    def col_status(self, col: int) -> LineStatus:
        return self.solve_col(col).status

    def row_hints(self, row: int) -> List[ForcedCell]:
        return self.solve_row(row).forced

    def col_hints(self, col: int) -> List[ForcedCell]:
        return self.solve_col(col).forced

    def line_results(self):
        rows = [self.solve_row(y) for y in range(self.height)]
        cols = [self.solve_col(x) for x in range(self.width)]
        return rows, cols

    def color_name(self, color: Color) -> str:
        for name, candidate in self.palette.items():
            if candidate == color:
                return name
        return color.to_hex()

    def __repr__(self):
        label = f" '{self.title}'" if self.title else ""
        return f"Puzzle{label}({self.width}x{self.height})"

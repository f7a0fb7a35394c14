import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from grid_logic.core.clue import Clue, Color, active_clues, required_gap
from grid_logic.core.grid import Cell, CellState


class Init(enum.Enum):
    LEFT = enum.auto()
    RIGHT = enum.auto()


class LineStatus(enum.Enum):
    CONTRADICTORY = "contradictory"
    INCOMPLETE = "consistent-incomplete"
    COMPLETE = "consistent-complete"


class ForcedState(enum.Enum):
    BLANK = "blank"
    FILLED = "filled"
    UNDETERMINED = "undetermined"


@dataclass
class Block:
    pos: int
    length: int
    color: Color

    @property
    def end(self) -> int:
        return self.pos + self.length

    def covers(self, position: int) -> bool:
        return self.pos <= position < self.end


@dataclass(frozen=True)
class ForcedCell:
    state: ForcedState = ForcedState.UNDETERMINED
    color: Optional[Color] = None

    @property
    def is_determined(self) -> bool:
        return self.state != ForcedState.UNDETERMINED

    def agrees_with(self, cell: Cell) -> bool:
        if self.state == ForcedState.FILLED:
            return cell.state == CellState.FILLED and cell.color == self.color
        if self.state == ForcedState.BLANK:
            return cell.state != CellState.FILLED
        return False


UNDETERMINED = ForcedCell()
FORCED_BLANK = ForcedCell(ForcedState.BLANK)


class BlockSequence:
    """
    Placement hypothesis for the clues of a single line.

    Blocks stay in clue order and keep the packed separation invariant: one
    empty cell between same-colored neighbours, none between different
    colors. A sequence built with Init.LEFT is refined with slide_left()
    toward the leftmost placement that agrees with the fixed cells of the
    line; Init.RIGHT pairs with slide_right(). Positions only ever move away
    from the packing boundary, and each move is forced by the current cells,
    so the fixpoint does not depend on the order violations are found in.
    """

    def __init__(
        self,
        line_size: int,
        clues: Sequence[Clue],
        init: Init = Init.LEFT,
        cells: Optional[Sequence[Cell]] = None,
    ):
        if cells is not None and len(cells) != line_size:
            raise ValueError(f"Line has {len(cells)} cells, expected {line_size}")

        clues = active_clues(clues)
        self.line_size = line_size
        self.init = init
        self._cells = cells
        self._blocks = [Block(0, clue.value, clue.color) for clue in clues]
        self._gaps = [0] + [required_gap(prev, cur) for prev, cur in zip(clues, clues[1:])]

        if init == Init.LEFT:
            self.flush_left()
        else:
            for block in self._blocks:
                block.pos = line_size - block.length
            self.flush_right()

        if self._blocks:
            self.feasible = self._in_bounds()
        else:
            self.feasible = not any(self._state(p) == CellState.FILLED for p in range(line_size))

    @classmethod
    def _from_blocks(cls, line_size, blocks, gaps, cells, init) -> "BlockSequence":
        sequence = cls.__new__(cls)
        sequence.line_size = line_size
        sequence.init = init
        sequence._cells = cells
        sequence._blocks = blocks
        sequence._gaps = gaps
        sequence.feasible = True
        return sequence

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def __getitem__(self, index: int) -> Block:
        return self._blocks[index]

    @property
    def empty(self) -> bool:
        return not self._blocks

    def positions(self) -> List[int]:
        return [block.pos for block in self._blocks]

    def snapshot(self) -> List[Block]:
        return [Block(b.pos, b.length, b.color) for b in self._blocks]

    def _state(self, position: int) -> CellState:
        if self._cells is None:
            return CellState.BLANK
        return self._cells[position].state

    def _conflicts(self, block: Block, position: int) -> bool:
        if self._cells is None:
            return False
        cell = self._cells[position]
        if cell.state == CellState.MARKED_EMPTY:
            return True
        return cell.state == CellState.FILLED and cell.color != block.color

    def _in_bounds(self) -> bool:
        if not self._blocks:
            return True
        return self._blocks[0].pos >= 0 and self._blocks[-1].end <= self.line_size

    def flush_left(self):
        for index in range(1, len(self._blocks)):
            minimum = self._blocks[index - 1].end + self._gaps[index]
            if self._blocks[index].pos < minimum:
                self._blocks[index].pos = minimum

    def flush_right(self):
        for index in range(len(self._blocks) - 2, -1, -1):
            block = self._blocks[index]
            maximum = self._blocks[index + 1].pos - self._gaps[index + 1] - block.length
            if block.pos > maximum:
                block.pos = maximum

    def _last_conflict(self, block: Block) -> Optional[int]:
        for position in range(min(block.end, self.line_size) - 1, block.pos - 1, -1):
            if self._conflicts(block, position):
                return position
        return None

    def _first_uncovered_fill(self) -> Optional[int]:
        if self._cells is None:
            return None
        index = 0
        for position in range(self.line_size):
            while index < len(self._blocks) and self._blocks[index].end <= position:
                index += 1
            if self._cells[position].state != CellState.FILLED:
                continue
            if index < len(self._blocks) and self._blocks[index].covers(position):
                continue
            return position
        return None

    def slide_left(self) -> bool:
        if not self.feasible or not self._blocks:
            return False

        moved = False
        for index, block in enumerate(self._blocks):
            if index > 0:
                minimum = self._blocks[index - 1].end + self._gaps[index]
                if block.pos < minimum:
                    block.pos = minimum
                    moved = True
            if block.end > self.line_size:
                self.feasible = False
                return False
            conflict = self._last_conflict(block)
            if conflict is not None:
                block.pos = conflict + 1
                moved = True
            if block.end > self.line_size:
                self.feasible = False
                return False

        position = self._first_uncovered_fill()
        if position is not None:
            # nearest block entirely to the left with the same color must reach it
            color = self._cells[position].color
            candidates = [
                i for i, b in enumerate(self._blocks) if b.end <= position and b.color == color
            ]
            if not candidates:
                self.feasible = False
                return False
            block = self._blocks[candidates[-1]]
            block.pos = position - block.length + 1
            moved = True
            self.flush_left()
            if not self._in_bounds():
                self.feasible = False
                return False

        return moved

    def _mirrored(self) -> "BlockSequence":
        count = len(self._blocks)
        blocks = [
            Block(self.line_size - b.end, b.length, b.color) for b in reversed(self._blocks)
        ]
        gaps = [0] + [self._gaps[count - j] for j in range(1, count)]
        cells = None if self._cells is None else list(reversed(list(self._cells)))
        return BlockSequence._from_blocks(self.line_size, blocks, gaps, cells, Init.LEFT)

    def slide_right(self) -> bool:
        if not self.feasible or not self._blocks:
            return False

        mirror = self._mirrored()
        moved = mirror.slide_left()
        for block, reflected in zip(self._blocks, reversed(mirror._blocks)):
            block.pos = self.line_size - reflected.end
        self.feasible = mirror.feasible
        return moved

    def settle(self) -> "BlockSequence":
        slide = self.slide_left if self.init == Init.LEFT else self.slide_right
        while slide():
            pass
        return self

    def __repr__(self):
        spans = ", ".join(f"[{b.pos},{b.end})" for b in self._blocks)
        return f"BlockSequence({self.init.name}, size={self.line_size}, blocks=[{spans}])"


@dataclass
class LineResult:
    status: LineStatus
    forced: List[ForcedCell]
    leftmost: List[Block] = field(default_factory=list)
    rightmost: List[Block] = field(default_factory=list)

    @property
    def is_contradictory(self) -> bool:
        return self.status == LineStatus.CONTRADICTORY

    @property
    def is_complete(self) -> bool:
        return self.status == LineStatus.COMPLETE

    def undetermined(self) -> List[int]:
        return [p for p, forced in enumerate(self.forced) if not forced.is_determined]

    def deductions(self, cells: Sequence[Cell]) -> List[int]:
        """Positions whose forced value is not yet reflected in the cells."""
        if self.is_contradictory:
            return []
        found = []
        for position, forced in enumerate(self.forced):
            cell = cells[position]
            if forced.state == ForcedState.FILLED and not forced.agrees_with(cell):
                found.append(position)
            elif forced.state == ForcedState.BLANK and cell.state == CellState.BLANK:
                found.append(position)
        return found


def forced_cells(left: BlockSequence, right: BlockSequence) -> List[ForcedCell]:
    forced = [FORCED_BLANK] * left.line_size
    for low, high in zip(left, right):
        for position in range(low.pos, high.end):
            forced[position] = UNDETERMINED
    for low, high in zip(left, right):
        for position in range(high.pos, low.end):
            forced[position] = ForcedCell(ForcedState.FILLED, low.color)
    return forced


def solve_line(cells: Sequence[Cell], clues: Sequence[Clue]) -> LineResult:
    size = len(cells)
    left = BlockSequence(size, clues, Init.LEFT, cells).settle()
    right = BlockSequence(size, clues, Init.RIGHT, cells).settle()

    if not (left.feasible and right.feasible):
        return LineResult(
            LineStatus.CONTRADICTORY, [UNDETERMINED] * size, left.snapshot(), right.snapshot()
        )

    forced = forced_cells(left, right)
    complete = all(f.is_determined and f.agrees_with(cell) for f, cell in zip(forced, cells))
    status = LineStatus.COMPLETE if complete else LineStatus.INCOMPLETE
    return LineResult(status, forced, left.snapshot(), right.snapshot())

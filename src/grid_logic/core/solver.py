import enum
from dataclasses import dataclass, field
from typing import List

from grid_logic.core.blocks import ForcedState, LineResult
from grid_logic.core.grid import LineView
from grid_logic.core.puzzle import Puzzle

DEFAULT_MAX_PASSES = 100


class SolveStatus(enum.Enum):
    SOLVED = "solved"
    STALLED = "stalled"
    CONTRADICTION = "contradiction"


@dataclass
class SolveReport:
    status: SolveStatus
    passes: int = 0
    cells_deduced: int = 0
    contradictory_rows: List[int] = field(default_factory=list)
    contradictory_cols: List[int] = field(default_factory=list)


class LineLogicSolver:
    """
    Sweeps every row and column, writing forced cells back into the grid,
    until a sweep deduces nothing new. Each line is analysed on its own;
    lines interact only through the cells written between them. There is no
    guessing, so puzzles that need lookahead end up STALLED.
    """

    def __init__(self, max_passes: int = DEFAULT_MAX_PASSES):
        self.max_passes = max_passes

    @staticmethod
    def apply(line: LineView, result: LineResult) -> int:
        applied = 0
        for position in result.deductions(line):
            forced = result.forced[position]
            if forced.state == ForcedState.FILLED:
                line[position].fill(forced.color)
            else:
                line[position].mark_empty()
            applied += 1
        return applied

    def sweep(self, puzzle: Puzzle, report: SolveReport) -> int:
        deduced = 0
        for row in range(puzzle.height):
            result = puzzle.solve_row(row)
            if result.is_contradictory:
                report.contradictory_rows.append(row)
                continue
            deduced += self.apply(puzzle.row(row), result)
        for col in range(puzzle.width):
            result = puzzle.solve_col(col)
            if result.is_contradictory:
                report.contradictory_cols.append(col)
                continue
            deduced += self.apply(puzzle.col(col), result)
        return deduced

    def resolve(self, puzzle: Puzzle) -> SolveReport:
        report = SolveReport(status=SolveStatus.STALLED)

        for _ in range(self.max_passes):
            report.passes += 1
            deduced = self.sweep(puzzle, report)
            report.cells_deduced += deduced

            if report.contradictory_rows or report.contradictory_cols:
                report.status = SolveStatus.CONTRADICTION
                return report
            if deduced == 0:
                break

        if puzzle.is_solved():
            report.status = SolveStatus.SOLVED
        return report

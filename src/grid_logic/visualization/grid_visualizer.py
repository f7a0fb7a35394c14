from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from grid_logic.core.blocks import ForcedCell, ForcedState, LineResult
from grid_logic.core.grid import CellState
from grid_logic.core.puzzle import Puzzle

CELL_SIZE = 0.45
CLUE_FONT_SIZE = 9
GRID_LINE_COLOR = "#888888"
BLANK_FACE = "#ffffff"
MARK_COLOR = "#b0b0b0"
HINT_ALPHA = 0.35
CONTRADICTION_COLOR = "#e15759"
DPI = 150


def rgb(color) -> tuple:
    return (color.r / 255, color.g / 255, color.b / 255)


def hint_overlay(result: LineResult, position: int) -> Optional[ForcedCell]:
    forced = result.forced[position]
    return forced if forced.is_determined else None


def draw_clues(ax, puzzle: Puzzle, rows: List[LineResult], cols: List[LineResult]):
    for y in range(puzzle.height):
        clues = [c for c in puzzle.row_clues(y) if c.value > 0]
        for i, clue in enumerate(reversed(clues)):
            ax.text(-0.6 - i, y + 0.5, str(clue.value), ha="center", va="center",
                    fontsize=CLUE_FONT_SIZE, color=rgb(clue.color))
        if rows[y].is_contradictory:
            ax.add_patch(Rectangle((0, y), puzzle.width, 1, fill=False,
                                   edgecolor=CONTRADICTION_COLOR, linewidth=2))

    for x in range(puzzle.width):
        clues = [c for c in puzzle.col_clues(x) if c.value > 0]
        for i, clue in enumerate(reversed(clues)):
            ax.text(x + 0.5, -0.6 - i, str(clue.value), ha="center", va="center",
                    fontsize=CLUE_FONT_SIZE, color=rgb(clue.color))
        if cols[x].is_contradictory:
            ax.add_patch(Rectangle((x, 0), 1, puzzle.height, fill=False,
                                   edgecolor=CONTRADICTION_COLOR, linewidth=2))


def draw_cells(ax, puzzle: Puzzle, rows: List[LineResult], show_hints: bool):
    for y in range(puzzle.height):
        for x in range(puzzle.width):
            cell = puzzle.cell(x, y)
            if cell.state == CellState.FILLED:
                ax.add_patch(Rectangle((x, y), 1, 1, facecolor=rgb(cell.color), edgecolor=GRID_LINE_COLOR))
                continue

            ax.add_patch(Rectangle((x, y), 1, 1, facecolor=BLANK_FACE, edgecolor=GRID_LINE_COLOR))
            if cell.state == CellState.MARKED_EMPTY:
                ax.plot([x + 0.25, x + 0.75], [y + 0.25, y + 0.75], color=MARK_COLOR)
                ax.plot([x + 0.25, x + 0.75], [y + 0.75, y + 0.25], color=MARK_COLOR)
                continue

            forced = hint_overlay(rows[y], x) if show_hints else None
            if forced is not None and forced.state == ForcedState.FILLED:
                ax.add_patch(Rectangle((x, y), 1, 1, facecolor=rgb(forced.color), alpha=HINT_ALPHA))
            elif forced is not None and forced.state == ForcedState.BLANK:
                ax.plot(x + 0.5, y + 0.5, marker=".", color=MARK_COLOR)


def render_puzzle(puzzle: Puzzle, output_path: Path, show_hints: bool = True) -> Path:
    """Renders the grid with its clues; hints shade forced cells of each row."""
    rows, cols = puzzle.line_results()
    max_row_clues = max(len(puzzle.row_clues(y)) for y in range(puzzle.height))
    max_col_clues = max(len(puzzle.col_clues(x)) for x in range(puzzle.width))

    fig, ax = plt.subplots(figsize=(
        (puzzle.width + max_row_clues) * CELL_SIZE + 1,
        (puzzle.height + max_col_clues) * CELL_SIZE + 1,
    ))
    draw_clues(ax, puzzle, rows, cols)
    draw_cells(ax, puzzle, rows, show_hints)

    ax.set_xlim(-max_row_clues - 0.2, puzzle.width)
    ax.set_ylim(puzzle.height, -max_col_clues - 0.2)
    ax.set_aspect("equal")
    ax.axis("off")
    if puzzle.title:
        ax.set_title(puzzle.title, fontsize=12, fontweight="bold")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    return output_path

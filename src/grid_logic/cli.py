import time
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grid_logic.core.blocks import ForcedCell, ForcedState, LineStatus
from grid_logic.core.grid import CellState
from grid_logic.core.puzzle import Puzzle
from grid_logic.core.solver import LineLogicSolver, SolveStatus
from grid_logic.data.ingestion import fetch_puzzle_sets
from grid_logic.data.loader import InvalidPuzzleFile, PUZZLE_SUFFIX, list_puzzles, load_puzzle, save_puzzle
from grid_logic.data.processor import validate_puzzle_sets
from grid_logic.utils.config import settings
from grid_logic.visualization.grid_visualizer import render_puzzle

app = typer.Typer(help="Grid Logic: line-by-line reasoning for nonograms.")
console = Console()

DEFAULT_LIMIT_PUZZLES = 20
MAX_NAME_LENGTH = 50

CYAN_STYLE = "cyan"
GREEN_STYLE = "green"
RED_STYLE = "red"
YELLOW_STYLE = "yellow"
MAGENTA_STYLE = "magenta"
BOLD_STYLE = "bold"
DIM_STYLE = "dim"

DISPLAY_SYMBOL_FILLED = "█ "
DISPLAY_SYMBOL_EMPTY = "· "
DISPLAY_SYMBOL_MARKED = "x "
HINT_SYMBOL_FILLED = "#"
HINT_SYMBOL_BLANK = "."
HINT_SYMBOL_UNDETERMINED = "?"

SOLVED_STATUS = "SOLVED"
FAILED_STATUS = "UNSOLVED"

STATUS_STYLES = {
    LineStatus.COMPLETE: GREEN_STYLE,
    LineStatus.INCOMPLETE: YELLOW_STYLE,
    LineStatus.CONTRADICTORY: RED_STYLE,
}


def resolve_path(puzzle: str) -> Path:
    path = Path(puzzle)
    if path.exists():
        return path
    candidate = settings.PUZZLE_DIR / puzzle
    if candidate.suffix != PUZZLE_SUFFIX:
        candidate = candidate.with_suffix(PUZZLE_SUFFIX)
    return candidate if candidate.exists() else path


def load_or_exit(puzzle: str) -> Puzzle:
    try:
        return load_puzzle(resolve_path(puzzle))
    except (FileNotFoundError, InvalidPuzzleFile) as e:
        console.print(f"[{BOLD_STYLE} {RED_STYLE}]Error:[/{BOLD_STYLE} {RED_STYLE}] {escape(str(e))}")
        raise typer.Exit(code=1)


def cell_markup(puzzle: Puzzle, col: int, row: int) -> str:
    cell = puzzle.cell(col, row)
    if cell.state == CellState.FILLED:
        return f"[{cell.color.to_hex()}]{DISPLAY_SYMBOL_FILLED}[/]"
    if cell.state == CellState.MARKED_EMPTY:
        return f"[{DIM_STYLE}]{DISPLAY_SYMBOL_MARKED}[/{DIM_STYLE}]"
    return f"[{DIM_STYLE}]{DISPLAY_SYMBOL_EMPTY}[/{DIM_STYLE}]"


def display_grid(puzzle: Puzzle):
    label = escape(puzzle.title or "Untitled")
    console.print(f"\n[{BOLD_STYLE}]{label} ({puzzle.width}x{puzzle.height})[/{BOLD_STYLE}]")
    for y in range(puzzle.height):
        clues = " ".join(str(c.value) for c in puzzle.row_clues(y)).rjust(12)
        row_str = "".join(cell_markup(puzzle, x, y) for x in range(puzzle.width))
        console.print(f"[{DIM_STYLE}]{clues}[/{DIM_STYLE}] │ {row_str}")


def format_forced(forced: List[ForcedCell]) -> str:
    symbols = {
        ForcedState.FILLED: HINT_SYMBOL_FILLED,
        ForcedState.BLANK: HINT_SYMBOL_BLANK,
        ForcedState.UNDETERMINED: HINT_SYMBOL_UNDETERMINED,
    }
    return "".join(symbols[f.state] for f in forced)


def status_table(puzzle: Puzzle) -> Table:
    rows, cols = puzzle.line_results()
    table = Table(title="Line Status", show_header=True, header_style=f"{BOLD_STYLE} {CYAN_STYLE}")
    table.add_column("Line", style=CYAN_STYLE)
    table.add_column("Clues", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Forced", style=DIM_STYLE)

    for kind, results, clue_fn in (("row", rows, puzzle.row_clues), ("col", cols, puzzle.col_clues)):
        for index, result in enumerate(results):
            style = STATUS_STYLES[result.status]
            table.add_row(
                f"{kind} {index}",
                " ".join(str(c.value) for c in clue_fn(index)),
                f"[{style}]{result.status.value}[/{style}]",
                format_forced(result.forced),
            )
    return table


@app.command()
def check(puzzle: Annotated[str, typer.Argument(help="Puzzle file or name in the puzzle directory")]):
    p = load_or_exit(puzzle)
    display_grid(p)
    console.print(status_table(p))

    failing = p.failing_lines()
    if not failing:
        console.print(f"\n  Status: [{GREEN_STYLE}]{SOLVED_STATUS}[/{GREEN_STYLE}]")
        return

    console.print(f"\n  Status: [{RED_STYLE}]{FAILED_STATUS}[/{RED_STYLE}]")
    console.print(f"  Failing rows: {failing.rows}")
    console.print(f"  Failing columns: {failing.cols}")
    raise typer.Exit(code=1)


@app.command()
def hint(
    puzzle: Annotated[str, typer.Argument(help="Puzzle file or name in the puzzle directory")],
    row: Optional[int] = typer.Option(None, help="Row to analyse"),
    col: Optional[int] = typer.Option(None, help="Column to analyse"),
):
    p = load_or_exit(puzzle)
    if row is None and col is None:
        rows, cols = p.line_results()
        found = False
        for kind, results, line_fn in (("row", rows, p.row), ("col", cols, p.col)):
            for index, result in enumerate(results):
                new_cells = result.deductions(line_fn(index))
                if new_cells:
                    found = True
                    console.print(f"  {kind} {index}: {format_forced(result.forced)}  new: {new_cells}")
        if not found:
            console.print(f"[{YELLOW_STYLE}]No line can be advanced by line logic alone.[/{YELLOW_STYLE}]")
        return

    if row is not None and col is not None:
        console.print(f"[{RED_STYLE}]Error: pass either --row or --col, not both[/{RED_STYLE}]")
        raise typer.Exit(code=1)

    try:
        result = p.solve_row(row) if row is not None else p.solve_col(col)
    except IndexError as e:
        console.print(f"[{RED_STYLE}]Error: {escape(str(e))}[/{RED_STYLE}]")
        raise typer.Exit(code=1)

    kind, index = ("row", row) if row is not None else ("col", col)
    style = STATUS_STYLES[result.status]
    console.print(f"  {kind} {index}: [{style}]{result.status.value}[/{style}]")
    if not result.is_contradictory:
        console.print(f"  Forced: {format_forced(result.forced)}")


@app.command()
def solve(
    puzzle: Annotated[str, typer.Argument(help="Puzzle file or name in the puzzle directory")],
    max_passes: int = typer.Option(settings.MAX_SOLVER_PASSES, help="Maximum full sweeps over all lines"),
    output: Optional[Path] = typer.Option(None, help="Write the resulting grid to this file"),
):
    p = load_or_exit(puzzle)
    solver = LineLogicSolver(max_passes=max_passes)

    start_time = time.perf_counter()
    report = solver.resolve(p)
    total_ms = (time.perf_counter() - start_time) * 1000

    display_grid(p)
    console.print(f"\n[{BOLD_STYLE}]Final Report:[/{BOLD_STYLE}]")
    if report.status == SolveStatus.SOLVED:
        status_text = f"[{GREEN_STYLE}]{SOLVED_STATUS}[/{GREEN_STYLE}]"
    elif report.status == SolveStatus.CONTRADICTION:
        status_text = f"[{RED_STYLE}]CONTRADICTION (rows {report.contradictory_rows}, cols {report.contradictory_cols})[/{RED_STYLE}]"
    else:
        status_text = f"[{YELLOW_STYLE}]STALLED (line logic alone is not enough)[/{YELLOW_STYLE}]"

    console.print(f"  Status: {status_text}")
    console.print(f"  Passes: [{BOLD_STYLE} {CYAN_STYLE}]{report.passes}[/{BOLD_STYLE} {CYAN_STYLE}]")
    console.print(f"  Cells Deduced: [{BOLD_STYLE} {CYAN_STYLE}]{report.cells_deduced}[/{BOLD_STYLE} {CYAN_STYLE}]")
    console.print(f"  Total Time: [{BOLD_STYLE} {MAGENTA_STYLE}]{total_ms:.2f} ms[/{BOLD_STYLE} {MAGENTA_STYLE}]")

    if output is not None:
        save_puzzle(p, output)
        console.print(f"[{DIM_STYLE}]Saved to {output}[/{DIM_STYLE}]")

    if report.status == SolveStatus.CONTRADICTION:
        raise typer.Exit(code=1)


@app.command()
def render(
    puzzle: Annotated[str, typer.Argument(help="Puzzle file or name in the puzzle directory")],
    output: Path = typer.Option(Path("puzzle.png"), help="Image path"),
    hints: bool = typer.Option(True, help="Shade cells forced by line logic"),
):
    p = load_or_exit(puzzle)
    path = render_puzzle(p, output, show_hints=hints)
    console.print(f"[{GREEN_STYLE}]✓ Rendered to {path}[/{GREEN_STYLE}]")


@app.command(name="list-puzzles")
def list_puzzle_files(
    limit: int = typer.Option(DEFAULT_LIMIT_PUZZLES, help="Number of puzzles to show"),
    directory: Optional[Path] = typer.Option(None, help="Directory to scan instead of PUZZLE_PATH"),
):
    paths = list_puzzles(directory)
    console.print(f"[{BOLD_STYLE} {CYAN_STYLE}]Available puzzles (Total: {len(paths)}):[/{BOLD_STYLE} {CYAN_STYLE}]")

    for path in paths[:limit]:
        try:
            p = load_puzzle(path)
        except InvalidPuzzleFile as e:
            console.print(f" - {path.name} [{RED_STYLE}]invalid: {escape(str(e))}[/{RED_STYLE}]")
            continue
        name = p.title or path.stem
        clean_name = (name[:MAX_NAME_LENGTH] + "...") if len(name) > MAX_NAME_LENGTH else name
        console.print(f" - {path.name}: {clean_name} ({p.width}x{p.height})", markup=False)


@app.command()
def ingest():
    console.print("Fetching VGRP-Bench nonogram sets from Hugging Face...")
    stored = fetch_puzzle_sets()
    console.print(f"Ingestion complete: {len(stored)} set(s) stored.")


@app.command()
def validate(
    max_passes: int = typer.Option(settings.MAX_SOLVER_PASSES, help="Maximum full sweeps per puzzle"),
):
    report = validate_puzzle_sets(max_passes=max_passes)
    if report is None:
        raise typer.Exit(code=1)


def main():
    app()


if __name__ == "__main__":
    main()

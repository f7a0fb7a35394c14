import ast
import re
import json
from pathlib import Path
from typing import Optional

import pandas as pd
import msgspec
import matplotlib.pyplot as plt
import seaborn as sns
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

from grid_logic.core.grid import CellState
from grid_logic.core.puzzle import Puzzle
from grid_logic.core.solver import LineLogicSolver, SolveStatus
from grid_logic.data.loader import VGRP_FILLED, record_to_puzzle
from grid_logic.schemas.nonogram import NonogramRecord
from grid_logic.utils.config import settings

console = Console()

REPORT_FILENAME = "validation_report.parquet"
ATLAS_FILENAME = "line_logic_atlas.png"
SUMMARY_FILENAME = "validation_summary.json"


def normalize_grid(grid):
    if not grid or not isinstance(grid, list):
        return []
    return [[str(cell).replace('*', '0') for cell in row] for row in grid]

def robust_parse_solution(text: str):
    if not isinstance(text, str):
        return None

    match = re.search(r"(\{.*\})", text, re.DOTALL)
    if not match:
        return None

    content = match.group(1).strip()

    try:
        return json.loads(content)
    except ValueError:
        pass
    try:
        return ast.literal_eval(content)
    except (ValueError, SyntaxError):
        pass

    ans_match = re.search(r'"answer":\s*(\[\[.*?\]\])', content, re.DOTALL)
    if ans_match:
        try:
            return {"answer": ast.literal_eval(ans_match.group(1))}
        except (ValueError, SyntaxError):
            return None
    return None

def build_record(raw: dict, fallback_id) -> NonogramRecord:
    init_data = ast.literal_eval(raw['initialization'])
    answer_data = robust_parse_solution(raw.get('sample_answer')) or {}

    init_grid = init_data.get('initialization', [])
    sol_grid = answer_data.get('answer') or answer_data.get('perception') or answer_data.get('grid') or []
    raw_hints = init_data.get('hints', init_data)

    return msgspec.convert({
        "id": str(raw.get('file_name', fallback_id)),
        "size": len(init_grid),
        "initialization": normalize_grid(init_grid),
        "solution": normalize_grid(sol_grid),
        "hints": {
            "row_hints": raw_hints.get('row_hints', []),
            "col_hints": raw_hints.get('col_hints', [])
        }
    }, NonogramRecord)

def solution_matches(puzzle: Puzzle, record: NonogramRecord) -> Optional[bool]:
    if not record.solution:
        return None
    check = Puzzle(puzzle.width, puzzle.height, puzzle.row_clues_list, puzzle.col_clues_list)
    for row, symbols in enumerate(record.solution[: record.size]):
        for col, symbol in enumerate(symbols[: record.size]):
            if symbol == VGRP_FILLED:
                check.mark_cell(col, row)
    return check.is_solved()

def analyze_record(record: NonogramRecord, solver: LineLogicSolver) -> dict:
    puzzle = record_to_puzzle(record)
    rows, cols = puzzle.line_results()
    contradictions = sum(r.is_contradictory for r in rows) + sum(c.is_contradictory for c in cols)

    report = solver.resolve(puzzle)
    decided = sum(cell.state != CellState.BLANK for cell in puzzle.grid)
    complexity = sum(c.value for y in range(puzzle.height) for c in puzzle.row_clues(y))

    return {
        "id": record.id,
        "size": record.size,
        "size_label": f"{record.size}x{record.size}",
        "complexity": complexity,
        "initial_contradictions": contradictions,
        "status": report.status.value,
        "line_solvable": report.status == SolveStatus.SOLVED,
        "passes": report.passes,
        "decided_ratio": decided / (puzzle.width * puzzle.height),
        "solution_valid": solution_matches(record_to_puzzle(record), record),
    }

def validate_puzzle_sets(max_passes: Optional[int] = None) -> Optional[pd.DataFrame]:
    subsets = []
    if settings.BRONZE_DIR.exists():
        subsets = [d for d in settings.BRONZE_DIR.iterdir() if d.is_dir() and (d / "test.parquet").exists()]
    if not subsets:
        console.print("[red]No bronze puzzle sets found. Run 'grid-logic ingest' first.[/red]")
        return None

    solver = LineLogicSolver(max_passes=max_passes or settings.MAX_SOLVER_PASSES)
    rows = []

    with Progress(SpinnerColumn(), TextColumn("{task.description}"), BarColumn(), TaskProgressColumn()) as progress:
        overall_task = progress.add_task("[yellow]Validating puzzle sets...", total=len(subsets))

        for subset_dir in subsets:
            df = pd.read_parquet(subset_dir / "test.parquet")
            first_error = None
            row_task = progress.add_task(f"[magenta]  {subset_dir.name}", total=len(df))

            for i, (_, row) in enumerate(df.iterrows()):
                try:
                    record = build_record(row.to_dict(), i)
                    result = analyze_record(record, solver)
                    result["subset"] = subset_dir.name
                    rows.append(result)
                except (ValueError, SyntaxError, KeyError, msgspec.ValidationError) as e:
                    if first_error is None:
                        first_error = {"row": i, "error": str(e)}
                finally:
                    progress.advance(row_task)

            progress.remove_task(row_task)
            if first_error:
                console.print(f"[dim]{subset_dir.name}: first skipped row {first_error['row']}: {first_error['error']}[/dim]")
            progress.advance(overall_task)

    if not rows:
        console.print("[bold red]✗ No puzzle could be validated[/bold red]")
        return None

    report_df = pd.DataFrame(rows)
    settings.REPORT_DIR.mkdir(parents=True, exist_ok=True)
    report_df.to_parquet(settings.REPORT_DIR / REPORT_FILENAME, engine='pyarrow', index=False)

    generate_atlas(report_df, settings.REPORT_DIR)
    write_summary(report_df, settings.REPORT_DIR)
    print_validation_summary(report_df)
    return report_df

def generate_atlas(df: pd.DataFrame, report_dir: Path):
    plt.figure(figsize=(10, 5))
    sns.histplot(data=df, x='decided_ratio', hue='size_label', multiple='stack', bins=20)
    plt.title('Line-Logic Atlas: Share of Cells Decided Without Guessing', fontsize=14, fontweight='bold')
    plt.xlabel('Decided Cells (ratio)', fontsize=12)
    plt.ylabel('Puzzles', fontsize=12)
    plt.grid(axis='y', alpha=0.3)
    plt.tight_layout()
    plt.savefig(report_dir / ATLAS_FILENAME, dpi=150)
    plt.close()

def summarize(df: pd.DataFrame) -> dict:
    summary = {}
    for size_label, group in df.groupby('size_label'):
        summary[size_label] = {
            "count": int(len(group)),
            "line_solvable": int(group['line_solvable'].sum()),
            "avg_decided_ratio": float(group['decided_ratio'].mean()),
            "avg_complexity": float(group['complexity'].mean()),
            "contradictory_inputs": int((group['initial_contradictions'] > 0).sum()),
        }
    return summary

def write_summary(df: pd.DataFrame, report_dir: Path):
    json_path = report_dir / SUMMARY_FILENAME
    with open(json_path, 'w') as f:
        json.dump(summarize(df), f, indent=2)
    console.print(f"[dim]Summary saved to: {json_path}[/dim]")

def print_validation_summary(df: pd.DataFrame):
    table = Table(title="Line-Logic Validation", show_header=True, header_style="bold cyan")
    table.add_column("Puzzle Size", style="cyan", justify="center")
    table.add_column("Count", style="green", justify="right")
    table.add_column("Line Solvable", style="yellow", justify="right")
    table.add_column("Avg Decided", style="magenta", justify="right")
    table.add_column("Bad Inputs", style="red", justify="right")

    for size_label, m in summarize(df).items():
        table.add_row(
            size_label,
            f"{m['count']:,}",
            f"{m['line_solvable'] / m['count']:.1%}",
            f"{m['avg_decided_ratio']:.1%}",
            f"{m['contradictory_inputs']:,}"
        )

    console.print("\n")
    console.print(Panel.fit("[bold cyan]Validation Complete[/bold cyan]", border_style="cyan"))
    console.print(table)
    console.print(f"\n[dim]Total puzzles validated: {len(df):,}")

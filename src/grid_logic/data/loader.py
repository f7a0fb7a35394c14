from pathlib import Path
from typing import Dict, List, Optional

import msgspec

from grid_logic.core.clue import BLACK, DEFAULT_COLOR_NAME, Clue, ClueSequence, Color, active_clues, zero_clues
from grid_logic.core.grid import CellState
from grid_logic.core.puzzle import Puzzle, PuzzleStructureError
from grid_logic.schemas.nonogram import ClueEntry, NonogramRecord, PuzzleDocument
from grid_logic.utils.config import settings

PUZZLE_SUFFIX = ".json"

SYMBOL_BLANK = "."
SYMBOL_MARKED = "x"
SYMBOL_DEFAULT_FILL = "#"

VGRP_FILLED = "s"
VGRP_EMPTY = "e"


class InvalidPuzzleFile(ValueError):
    pass


def parse_palette(raw: Dict[str, str]) -> Dict[str, Color]:
    palette = {}
    for name, value in raw.items():
        try:
            palette[name] = Color.from_hex(value)
        except ValueError as e:
            raise InvalidPuzzleFile(f"Palette entry '{name}': {e}") from e
    if not palette:
        palette[DEFAULT_COLOR_NAME] = BLACK
    return palette


def default_color(palette: Dict[str, Color]) -> Color:
    if DEFAULT_COLOR_NAME in palette:
        return palette[DEFAULT_COLOR_NAME]
    return next(iter(palette.values()), BLACK)


def parse_clues(entries: List[ClueEntry], palette: Dict[str, Color]) -> ClueSequence:
    clues: ClueSequence = []
    for entry in entries:
        if isinstance(entry, int):
            value, color = entry, default_color(palette)
        else:
            if len(entry) != 2 or not isinstance(entry[0], int) or not isinstance(entry[1], str):
                raise InvalidPuzzleFile(f"Malformed clue {entry!r}, expected [length, color]")
            value, name = entry
            if name not in palette:
                raise InvalidPuzzleFile(f"Clue color '{name}' is not in the palette")
            color = palette[name]
        try:
            clues.append(Clue(value, color))
        except ValueError as e:
            raise InvalidPuzzleFile(str(e)) from e
    return clues or zero_clues()


def document_to_puzzle(doc: PuzzleDocument) -> Puzzle:
    palette = parse_palette(doc.palette)
    try:
        puzzle = Puzzle(
            doc.width,
            doc.height,
            row_clues=[parse_clues(line, palette) for line in doc.row_clues],
            col_clues=[parse_clues(line, palette) for line in doc.col_clues],
            title=doc.title,
            author=doc.author,
            palette=palette,
        )
    except PuzzleStructureError as e:
        raise InvalidPuzzleFile(str(e)) from e

    if doc.grid:
        if len(doc.grid) != doc.height:
            raise InvalidPuzzleFile(f"Grid has {len(doc.grid)} rows, expected {doc.height}")
        for row, text in enumerate(doc.grid):
            if len(text) != doc.width:
                raise InvalidPuzzleFile(f"Grid row {row} has {len(text)} cells, expected {doc.width}")
            for col, symbol in enumerate(text):
                if symbol == SYMBOL_BLANK:
                    continue
                if symbol == SYMBOL_MARKED:
                    puzzle.mark_empty(col, row)
                elif symbol == SYMBOL_DEFAULT_FILL:
                    puzzle.mark_cell(col, row, default_color(palette))
                elif symbol in palette:
                    puzzle.mark_cell(col, row, palette[symbol])
                else:
                    raise InvalidPuzzleFile(f"Unknown grid symbol '{symbol}' at ({col}, {row})")

    return puzzle


def encode_clues(clues: ClueSequence, puzzle: Puzzle) -> List[ClueEntry]:
    default = default_color(puzzle.palette)
    return [
        clue.value if clue.color == default else [clue.value, puzzle.color_name(clue.color)]
        for clue in active_clues(clues)
    ]


def encode_grid(puzzle: Puzzle) -> List[str]:
    default = default_color(puzzle.palette)
    rows = []
    for line in puzzle.grid.rows():
        symbols = []
        for cell in line:
            if cell.state == CellState.BLANK:
                symbols.append(SYMBOL_BLANK)
            elif cell.state == CellState.MARKED_EMPTY:
                symbols.append(SYMBOL_MARKED)
            else:
                name = puzzle.color_name(cell.color)
                if len(name) == 1 and name in puzzle.palette:
                    symbols.append(name)
                elif cell.color == default:
                    symbols.append(SYMBOL_DEFAULT_FILL)
                else:
                    raise InvalidPuzzleFile(f"Color '{name}' needs a one-character palette name to appear in a grid")
        rows.append("".join(symbols))
    return rows


def puzzle_to_document(puzzle: Puzzle, include_grid: bool = True) -> PuzzleDocument:
    has_marks = any(cell.state != CellState.BLANK for cell in puzzle.grid)
    return PuzzleDocument(
        width=puzzle.width,
        height=puzzle.height,
        row_clues=[encode_clues(puzzle.row_clues(y), puzzle) for y in range(puzzle.height)],
        col_clues=[encode_clues(puzzle.col_clues(x), puzzle) for x in range(puzzle.width)],
        title=puzzle.title,
        author=puzzle.author,
        palette={name: color.to_hex() for name, color in puzzle.palette.items()},
        grid=encode_grid(puzzle) if include_grid and has_marks else [],
    )


def load_puzzle(path: Path) -> Puzzle:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Puzzle file missing at {path}")
    try:
        doc = msgspec.json.decode(path.read_bytes(), type=PuzzleDocument)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise InvalidPuzzleFile(f"{path.name}: {e}") from e
    return document_to_puzzle(doc)


def save_puzzle(puzzle: Puzzle, path: Path, include_grid: bool = True) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = msgspec.json.encode(puzzle_to_document(puzzle, include_grid))
    path.write_bytes(msgspec.json.format(encoded, indent=2))
    return path


def record_to_puzzle(record: NonogramRecord) -> Puzzle:
    """Builds a monochrome puzzle from a VGRP-Bench record, applying its given cells."""
    row_clues = [[Clue(v) for v in hints if v > 0] or zero_clues() for hints in record.hints.row_hints]
    col_clues = [[Clue(v) for v in hints if v > 0] or zero_clues() for hints in record.hints.col_hints]
    puzzle = Puzzle(record.size, record.size, row_clues=row_clues, col_clues=col_clues, title=record.id)

    for row, symbols in enumerate(record.initialization[: record.size]):
        for col, symbol in enumerate(symbols[: record.size]):
            if symbol == VGRP_FILLED:
                puzzle.mark_cell(col, row)
            elif symbol == VGRP_EMPTY:
                puzzle.mark_empty(col, row)
    return puzzle


def list_puzzles(directory: Optional[Path] = None) -> List[Path]:
    directory = Path(directory) if directory is not None else settings.PUZZLE_DIR
    if not directory.exists():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix == PUZZLE_SUFFIX)

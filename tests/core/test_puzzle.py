import pytest

from grid_logic.core.blocks import ForcedState, LineStatus
from grid_logic.core.clue import BLACK, Clue, Color, monochrome
from grid_logic.core.grid import Cell, CellState, Grid, line_clues
from grid_logic.core.puzzle import Puzzle, PuzzleStructureError, is_line_solved

RED = Color(225, 87, 89)


@pytest.fixture
def heart() -> Puzzle:
    return Puzzle(
        5, 5,
        row_clues=[monochrome([1, 1]), monochrome([5]), monochrome([5]), monochrome([3]), monochrome([1])],
        col_clues=[monochrome([2]), monochrome([4]), monochrome([4]), monochrome([4]), monochrome([2])],
        title="Heart",
    )


def fill_rows(puzzle: Puzzle, rows):
    for y, text in enumerate(rows):
        for x, symbol in enumerate(text):
            if symbol == "#":
                puzzle.mark_cell(x, y)


HEART_SOLUTION = [".#.#.", "#####", "#####", ".###.", "..#.."]


class TestGrid:
    def test_rejects_non_positive_dimensions(self):
        with pytest.raises(ValueError):
            Grid(0, 3)

    def test_row_and_column_views_share_cells(self):
        grid = Grid(3, 2)
        assert grid.row(1)[2] is grid.col(2)[1]

        grid.row(1)[2].fill(RED)
        assert grid.col(2)[1].state == CellState.FILLED
        assert grid.at(2, 1).color == RED

    def test_assigning_through_view_copies_the_cell(self):
        grid = Grid(2, 2)
        source = Cell(CellState.FILLED, RED)
        grid.row(0)[1] = source

        assert grid.at(1, 0) is not source
        assert grid.col(1)[0].color == RED

        source.mark_empty()
        assert grid.at(1, 0).state == CellState.FILLED

    def test_views_support_negative_indexes_and_bounds(self):
        grid = Grid(4, 3)
        assert grid.row(0)[-1] is grid.at(3, 0)
        assert len(grid.col(0)) == 3
        with pytest.raises(IndexError):
            grid.row(0)[4]
        with pytest.raises(IndexError):
            grid.at(4, 0)

    def test_line_clues_split_on_color_change(self):
        grid = Grid(6, 1)
        row = grid.row(0)
        row[0].fill()
        row[1].fill()
        row[2].fill(RED)
        row[4].fill(RED)

        assert line_clues(row) == [Clue(2, BLACK), Clue(1, RED), Clue(1, RED)]

    def test_line_clues_of_empty_line_is_zero(self):
        assert line_clues(Grid(3, 1).row(0)) == [Clue(0)]


class TestLineVerification:
    @pytest.mark.parametrize("text,values,expected", [
        ("##.#.", [2, 1], True),
        (".....", [0], True),
        ("###..", [2], False),
        ("##..#", [2], False),
        ("...##", [3], False),
        ("#.#..", [1, 1, 1], False),
        ("x##x.", [2], True),
    ])
    def test_monochrome_lines(self, text, values, expected):
        grid = Grid(len(text), 1)
        for x, symbol in enumerate(text):
            if symbol == "#":
                grid.at(x, 0).fill()
            elif symbol == "x":
                grid.at(x, 0).mark_empty()
        assert is_line_solved(grid.row(0), monochrome(values)) is expected

    def test_wrong_color_fails(self):
        grid = Grid(2, 1)
        grid.at(0, 0).fill(RED)
        grid.at(1, 0).fill(RED)
        assert not is_line_solved(grid.row(0), [Clue(2)])
        assert is_line_solved(grid.row(0), [Clue(2, RED)])

    def test_zero_valued_clues_are_ignored(self):
        grid = Grid(3, 1)
        grid.at(1, 0).fill()
        assert is_line_solved(grid.row(0), [Clue(0), Clue(1), Clue(0)])

    def test_adjacent_runs_of_different_colors(self):
        grid = Grid(3, 1)
        grid.at(0, 0).fill(RED)
        grid.at(1, 0).fill()
        assert is_line_solved(grid.row(0), [Clue(1, RED), Clue(1)])
        assert not is_line_solved(grid.row(0), [Clue(1), Clue(1, RED)])


class TestPuzzle:
    def test_defaults_to_zero_clues(self):
        puzzle = Puzzle(3, 2)
        assert puzzle.row_clues(0) == [Clue(0)]
        assert puzzle.col_clues(2) == [Clue(0)]
        assert puzzle.is_solved()

        puzzle.mark_cell(1, 1)
        assert not puzzle.is_solved()

    def test_structural_errors(self):
        with pytest.raises(PuzzleStructureError):
            Puzzle(0, 2)
        with pytest.raises(PuzzleStructureError, match="row clue"):
            Puzzle(2, 2, row_clues=[monochrome([1])])
        with pytest.raises(PuzzleStructureError, match="column clue"):
            Puzzle(2, 2, col_clues=[monochrome([1])] * 3)

    def test_column_access_by_index(self, heart):
        heart.mark_cell(1, 3)
        assert heart[1][3].state == CellState.FILLED
        assert heart[1][3] is heart.cell(1, 3)
        assert heart.row(3)[1] is heart.col(1)[3]

    def test_single_row_puzzle(self):
        puzzle = Puzzle(5, 1, row_clues=[monochrome([2, 1])], col_clues=[monochrome([1]), monochrome([1]), [Clue(0)], monochrome([1]), [Clue(0)]])
        for x in (0, 1, 3):
            puzzle.mark_cell(x, 0)

        assert puzzle.is_row_solved(0)
        assert puzzle.is_solved()

    def test_diagonal_two_by_two(self):
        puzzle = Puzzle(2, 2, row_clues=[monochrome([1])] * 2, col_clues=[monochrome([1])] * 2)
        puzzle.mark_cell(0, 0)
        puzzle.mark_cell(1, 1)
        assert puzzle.is_solved()

    def test_columns_are_verified(self):
        puzzle = Puzzle(2, 2, row_clues=[monochrome([1]), monochrome([1])], col_clues=[monochrome([2]), [Clue(0)]])
        puzzle.mark_cell(0, 0)
        puzzle.mark_cell(1, 1)

        assert puzzle.is_row_solved(0) and puzzle.is_row_solved(1)
        assert not puzzle.is_col_solved(0)
        assert not puzzle.is_solved()

        failing = puzzle.failing_lines()
        assert failing
        assert failing.rows == []
        assert failing.cols == [0, 1]

    def test_heart_solution_verifies(self, heart):
        fill_rows(heart, HEART_SOLUTION)
        assert heart.is_solved()
        assert not heart.failing_lines()

    def test_mark_and_clear(self, heart):
        heart.mark_empty(0, 0)
        heart.mark_cell(1, 0)
        assert heart.cell(0, 0).state == CellState.MARKED_EMPTY

        heart.clear_cell(1, 0)
        assert heart.cell(1, 0).state == CellState.BLANK

        heart.clear()
        assert all(cell.state == CellState.BLANK for cell in heart.grid)

    def test_attempt_mark_rejects_contradiction(self):
        puzzle = Puzzle(6, 1, row_clues=[monochrome([5])], col_clues=[monochrome([1])] * 6)
        for x in range(5):
            assert puzzle.attempt_mark(x, 0)

        assert not puzzle.attempt_mark(5, 0)
        assert puzzle.cell(5, 0).state == CellState.BLANK
        assert puzzle.row_status(0) == LineStatus.COMPLETE

    def test_attempt_mark_restores_previous_state(self):
        puzzle = Puzzle(2, 1, row_clues=[monochrome([1])], col_clues=[monochrome([1]), [Clue(0)]])
        puzzle.mark_empty(1, 0)

        assert not puzzle.attempt_mark(1, 0)
        assert puzzle.cell(1, 0).state == CellState.MARKED_EMPTY

    def test_from_solution_derives_clues(self):
        picture = [
            [BLACK, BLACK, None],
            [None, RED, RED],
        ]
        puzzle = Puzzle.from_solution(picture, title="Tiny")

        assert puzzle.title == "Tiny"
        assert puzzle.row_clues(0) == [Clue(2)]
        assert puzzle.row_clues(1) == [Clue(2, RED)]
        assert puzzle.col_clues(0) == [Clue(1)]
        assert puzzle.col_clues(1) == [Clue(1), Clue(1, RED)]
        assert all(cell.state == CellState.BLANK for cell in puzzle.grid)

    def test_line_hints_follow_grid_state(self, heart):
        assert [f.state for f in heart.row_hints(1)] == [ForcedState.FILLED] * 5
        assert heart.col_status(0) == LineStatus.INCOMPLETE

        rows, cols = heart.line_results()
        assert len(rows) == 5 and len(cols) == 5

        heart.mark_cell(0, 4)
        assert heart.row_status(4) == LineStatus.COMPLETE
        heart.mark_cell(4, 4)
        assert heart.row_status(4) == LineStatus.CONTRADICTORY

    def test_color_name_falls_back_to_hex(self):
        puzzle = Puzzle(1, 1, palette={"r": RED})
        assert puzzle.color_name(RED) == "r"
        assert puzzle.color_name(BLACK) == "#000000"

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from grid_logic.core.solver import LineLogicSolver
from grid_logic.data.processor import (
    analyze_record,
    build_record,
    generate_atlas,
    normalize_grid,
    robust_parse_solution,
    solution_matches,
    summarize,
    validate_puzzle_sets,
)
from grid_logic.data.loader import record_to_puzzle

INITIALIZATION = (
    "{'initialization': [['0', '0'], ['0', '0']], "
    "'hints': {'row_hints': [[1], [2]], 'col_hints': [[2], [1]]}}"
)


class TestProcessor:
    @pytest.fixture
    def raw_row(self) -> dict:
        return {
            "initialization": INITIALIZATION,
            "sample_answer": '{"answer": [["s", "e"], ["s", "s"]]}',
            "file_name": "puzzle_001",
        }

    @pytest.fixture
    def mock_bronze_df(self, raw_row) -> pd.DataFrame:
        return pd.DataFrame({key: [value] for key, value in raw_row.items()})

    def test_normalize_grid(self) -> None:
        grid = [["*", "1"], [0, "*"]]
        assert normalize_grid(grid) == [["0", "1"], ["0", "0"]]
        assert normalize_grid(None) == []
        assert normalize_grid("not a list") == []

    def test_robust_parse_solution_variants(self) -> None:
        assert robust_parse_solution('Some text {"answer": [[1]]} more text') == {"answer": [[1]]}
        assert robust_parse_solution("Result: {'answer': [[1]]}") == {"answer": [[1]]}
        assert robust_parse_solution('{"answer": [[1, 1]]') is None
        assert robust_parse_solution(123) is None # type: ignore

    def test_build_record(self, raw_row) -> None:
        record = build_record(raw_row, 0)

        assert record.id == "puzzle_001"
        assert record.size == 2
        assert record.hints.row_hints == [[1], [2]]
        assert record.solution == [["s", "e"], ["s", "s"]]

    def test_build_record_rejects_garbage(self) -> None:
        with pytest.raises((ValueError, SyntaxError)):
            build_record({"initialization": "invalid"}, 0)

    def test_analyze_record(self, raw_row) -> None:
        record = build_record(raw_row, 0)
        result = analyze_record(record, LineLogicSolver())

        assert result["id"] == "puzzle_001"
        assert result["size_label"] == "2x2"
        assert result["complexity"] == 3
        assert result["initial_contradictions"] == 0
        assert result["line_solvable"] is True
        assert result["decided_ratio"] == 1.0
        assert result["solution_valid"] is True

    def test_solution_matches_without_solution(self, raw_row) -> None:
        record = build_record({**raw_row, "sample_answer": "no answer here"}, 0)
        assert solution_matches(record_to_puzzle(record), record) is None

    def test_summarize_groups_by_size(self) -> None:
        df = pd.DataFrame({
            "size_label": ["5x5", "5x5", "8x8"],
            "line_solvable": [True, False, True],
            "decided_ratio": [1.0, 0.5, 1.0],
            "complexity": [10, 12, 30],
            "initial_contradictions": [0, 1, 0],
        })
        summary = summarize(df)

        assert summary["5x5"]["count"] == 2
        assert summary["5x5"]["line_solvable"] == 1
        assert summary["5x5"]["avg_decided_ratio"] == 0.75
        assert summary["5x5"]["contradictory_inputs"] == 1
        assert summary["8x8"]["avg_complexity"] == 30.0

    @patch("grid_logic.data.processor.pd.read_parquet")
    @patch("grid_logic.data.processor.pd.DataFrame.to_parquet")
    @patch("grid_logic.data.processor.plt.savefig")
    @patch("grid_logic.data.processor.settings")
    @patch("grid_logic.data.processor.console.print")
    def test_validate_puzzle_sets_full_flow(
        self,
        mock_print: MagicMock,
        mock_settings: MagicMock,
        mock_savefig: MagicMock,
        mock_to_parquet: MagicMock,
        mock_read_parquet: MagicMock,
        mock_bronze_df: pd.DataFrame,
        tmp_path: Path
    ) -> None:
        mock_settings.BRONZE_DIR = tmp_path / "bronze"
        mock_settings.REPORT_DIR = tmp_path / "reports"
        mock_settings.MAX_SOLVER_PASSES = 10
        subset_dir = mock_settings.BRONZE_DIR / "nonogram_2x2"
        subset_dir.mkdir(parents=True)
        (subset_dir / "test.parquet").touch()
        mock_read_parquet.return_value = mock_bronze_df

        report = validate_puzzle_sets()

        assert mock_read_parquet.called
        assert mock_to_parquet.called
        assert mock_savefig.called
        assert len(report) == 1
        assert report.iloc[0]["subset"] == "nonogram_2x2"

        summary = json.loads((tmp_path / "reports" / "validation_summary.json").read_text())
        assert summary["2x2"]["line_solvable"] == 1

    @patch("grid_logic.data.processor.settings")
    @patch("grid_logic.data.processor.console.print")
    @patch("grid_logic.data.processor.pd.read_parquet")
    def test_validate_without_bronze_data(
        self,
        mock_read: MagicMock,
        mock_print: MagicMock,
        mock_settings: MagicMock,
        tmp_path: Path
    ) -> None:
        mock_settings.BRONZE_DIR = tmp_path / "empty_bronze"
        mock_settings.BRONZE_DIR.mkdir()

        assert validate_puzzle_sets() is None
        assert not mock_read.called
        all_prints = "".join(str(c) for c in mock_print.call_args_list)
        assert "No bronze puzzle sets found" in all_prints

    @patch("grid_logic.data.processor.pd.read_parquet")
    @patch("grid_logic.data.processor.settings")
    @patch("grid_logic.data.processor.console.print")
    def test_validate_skips_invalid_rows(
        self,
        mock_print: MagicMock,
        mock_settings: MagicMock,
        mock_read_parquet: MagicMock,
        tmp_path: Path
    ) -> None:
        mock_settings.BRONZE_DIR = tmp_path / "bronze"
        mock_settings.MAX_SOLVER_PASSES = 10
        subset_dir = mock_settings.BRONZE_DIR / "fail_subset"
        subset_dir.mkdir(parents=True)
        (subset_dir / "test.parquet").touch()
        mock_read_parquet.return_value = pd.DataFrame({
            "initialization": ["invalid"],
            "sample_answer": ["invalid"],
            "file_name": ["fail"]
        })

        assert validate_puzzle_sets() is None
        all_prints = "".join(str(c) for c in mock_print.call_args_list)
        assert "first skipped row 0" in all_prints
        assert "No puzzle could be validated" in all_prints

    @patch("grid_logic.data.processor.plt.savefig")
    def test_generate_atlas_execution(self, mock_savefig: MagicMock, tmp_path: Path) -> None:
        df = pd.DataFrame({"decided_ratio": [0.5, 1.0], "size_label": ["5x5", "5x5"]})
        generate_atlas(df, tmp_path)
        mock_savefig.assert_called_once_with(tmp_path / "line_logic_atlas.png", dpi=150)

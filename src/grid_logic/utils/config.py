import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Project Root (calculated relative to this file)
    ROOT_DIR: Path = Path(__file__).resolve().parents[3]

    # HF Settings
    HF_TOKEN: str = os.getenv("HF_TOKEN", "")
    HF_DATASET_ID: str = os.getenv("HF_DATASET_ID", "VGRP-Bench/VGRP-Bench")

    # Storage Paths
    PUZZLE_DIR: Path = ROOT_DIR / os.getenv("PUZZLE_PATH", "puzzles")
    BRONZE_DIR: Path = ROOT_DIR / os.getenv("BRONZE_PATH", "data/bronze")
    REPORT_DIR: Path = ROOT_DIR / os.getenv("REPORT_PATH", "docs/reports")

    # Line-logic driver
    MAX_SOLVER_PASSES: int = int(os.getenv("MAX_SOLVER_PASSES", "100"))

settings = Settings()

import shutil
from pathlib import Path
from typing import List, Optional

from huggingface_hub import hf_hub_download
from rich.console import Console

from grid_logic.utils.config import settings

console = Console()

NONOGRAM_SUBSETS = [
    "nonogram_5x5",
    "nonogram_8x8",
    "nonogram_12x12"
]

SUBSET_FILENAME = "test-00000-of-00001.parquet"
STORED_FILENAME = "test.parquet"


def fetch_puzzle_sets(subsets: Optional[List[str]] = None) -> List[Path]:
    """
    Downloads the VGRP-Bench nonogram parquet files into the bronze directory.
    A failed subset is reported and skipped.
    """
    token = settings.HF_TOKEN if settings.HF_TOKEN.strip() else None
    if not token:
        console.print("[dim]No HF_TOKEN found. Proceeding with public access.[/dim]")

    settings.BRONZE_DIR.mkdir(parents=True, exist_ok=True)
    stored = []

    for subset in subsets or NONOGRAM_SUBSETS:
        console.print(f"Fetching {subset}...")
        try:
            cached = hf_hub_download(
                repo_id=settings.HF_DATASET_ID,
                filename=f"{subset}/{SUBSET_FILENAME}",
                repo_type="dataset",
                token=token
            )
        except Exception as e:
            console.print(f"  [red]✗ Failed to download {subset}: {e}[/red]")
            continue

        target_dir = settings.BRONZE_DIR / subset
        target_dir.mkdir(exist_ok=True)
        target_path = target_dir / STORED_FILENAME
        shutil.copy(cached, target_path)
        stored.append(target_path)
        console.print(f"  [green]✓ Stored: {target_path}[/green]")

    return stored

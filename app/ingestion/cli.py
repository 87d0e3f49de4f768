"""Command-line entry point: ``python -m app.ingestion [path]`` or ``sales-import``."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from app.core.config import DATASET_PATH, INGEST_BATCH_SIZE, INGEST_CHUNK_SIZE
from app.core.database import create_all_tables
from app.core.exceptions import SalesExplorerError
from app.ingestion.pipeline import IngestionPipeline
from app.logging.config import configure_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Import a sales CSV into the store. Returns the process exit status."""
    ap = argparse.ArgumentParser(description="Replace the transactions store with a CSV export.")
    ap.add_argument("path", nargs="?", default=DATASET_PATH, help=f"CSV file to import (default: {DATASET_PATH})")
    ap.add_argument("--batch-size", type=int, default=INGEST_BATCH_SIZE, help="Documents per insert batch")
    ap.add_argument("--chunk-size", type=int, default=INGEST_CHUNK_SIZE, help="Rows read per CSV chunk")
    args = ap.parse_args(argv)

    configure_logging()

    path = Path(args.path)
    if not path.is_file():
        print(f"CSV file not found at: {path}")
        return 1

    try:
        create_all_tables()
        result = IngestionPipeline(batch_size=args.batch_size, chunk_size=args.chunk_size).run(path)
    except SalesExplorerError as e:
        logger.error("Import failed: %s", e)
        print(f"Import failed: {e}")
        return 1

    print(f"Successfully imported {result.inserted} transactions")
    if result.rejected or result.rows_skipped:
        print(f"Rejected {result.rejected} documents, skipped {result.rows_skipped} rows")
    return 0

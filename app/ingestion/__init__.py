"""
CSV ingestion for the transactions store.

Main Components:
- IngestionPipeline: streams a CSV export, repairs its header, maps rows and full-replaces the store
- HeaderRepairState / HeaderRepairingReader: per-run fix for the split ``Gender``/``Age`` header
- map_row: source row -> canonical document
- BatchLoader: sequential batches with per-document rejection
"""

from pathlib import Path
from typing import Optional, Union

from .header_repair import HeaderRepairingReader, HeaderRepairState
from .loader import BatchLoader
from .mapper import map_row
from .pipeline import IngestionPipeline, IngestionResult


def import_csv(path: Union[str, Path], batch_size: Optional[int] = None) -> int:
    """Replace the store with the rows of ``path``; returns the number inserted."""
    pipeline = IngestionPipeline() if batch_size is None else IngestionPipeline(batch_size=batch_size)
    return pipeline.run(path).inserted


__all__ = [
    "BatchLoader",
    "HeaderRepairState",
    "HeaderRepairingReader",
    "IngestionPipeline",
    "IngestionResult",
    "import_csv",
    "map_row",
]

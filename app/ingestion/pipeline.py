"""CSV ingestion pipeline: read, repair, map and full-replace the store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Union

import pandas as pd
from sqlalchemy.orm import Session

from app.core.config import INGEST_BATCH_SIZE, INGEST_CHUNK_SIZE
from app.core.database import SessionLocal
from app.core.exceptions import IngestionError, RowMappingError, SourceReadError
from app.ingestion.header_repair import HeaderRepairingReader, HeaderRepairState
from app.ingestion.loader import BatchLoader
from app.ingestion.mapper import map_row

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Counts from one ingestion run."""

    rows_read: int = 0
    rows_skipped: int = 0
    inserted: int = 0
    rejected: int = 0
    batches: int = 0
    header_repaired: bool = False


class IngestionPipeline:
    """Replaces the whole transactions store with the contents of a CSV file."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        batch_size: int = INGEST_BATCH_SIZE,
        chunk_size: int = INGEST_CHUNK_SIZE,
    ):
        self.session_factory = session_factory
        self.batch_size = batch_size
        self.chunk_size = chunk_size

    def run(self, path: Union[str, Path]) -> IngestionResult:
        """Load ``path`` into the store, replacing every existing transaction.

        Raises:
            IngestionError: the file is missing.
            SourceReadError: the file is unreadable or not CSV.
            BatchLoadError: a batch could not be written; earlier batches stay.
        """
        path = Path(path)
        if not path.is_file():
            raise IngestionError(f"Source file not found: {path}")

        logger.info("Importing transactions from %s", path)
        with self.session_factory() as session:
            loader = BatchLoader(session, batch_size=self.batch_size)
            try:
                with open(path, "r", encoding="utf-8-sig", newline="") as handle:
                    return self._load(HeaderRepairingReader(handle, HeaderRepairState()), loader)
            except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
                logger.error("Cannot read %s (%d inserted): %s", path, loader.inserted, e)
                raise SourceReadError(str(path), loader.inserted, loader.cleared, e) from e
            finally:
                if loader.cleared:
                    generation = loader.dao.advance_generation()
                    logger.info("Store generation advanced to %d", generation)

    def _load(self, stream: HeaderRepairingReader, loader: BatchLoader) -> IngestionResult:
        result = IngestionResult()
        ingested_at = datetime.now()

        with pd.read_csv(
            stream,
            dtype=str,
            keep_default_na=False,
            chunksize=self.chunk_size,
            on_bad_lines="warn",
        ) as chunks:
            result.header_repaired = stream.state.repaired
            if result.header_repaired:
                logger.info("Repaired split header line")

            loader.clear()

            for chunk in chunks:
                chunk.columns = [str(column).strip() for column in chunk.columns]
                for row in chunk.to_dict(orient="records"):
                    result.rows_read += 1
                    try:
                        document = map_row(row, result.rows_read, ingested_at)
                    except RowMappingError as e:
                        result.rows_skipped += 1
                        logger.warning("Skipping row: %s", e)
                        continue
                    loader.add(document)

            loader.flush()

        result.inserted = loader.inserted
        result.rejected = loader.rejected
        result.batches = loader.batches
        logger.info(
            "Parsed %d rows, imported %d transactions (%d rejected, %d skipped) in %d batches",
            result.rows_read,
            result.inserted,
            result.rejected,
            result.rows_skipped,
            result.batches,
        )
        return result

"""Batched full-replace loading of mapped documents into the store."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import INGEST_BATCH_SIZE
from app.core.exceptions import BatchLoadError, StoreError
from app.transactions.dao import TransactionDAO
from app.transactions.schemas import TransactionRecord

logger = logging.getLogger(__name__)


def validate_document(document: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Return (canonical record, None) or (None, reason) for an invalid document."""
    try:
        record = TransactionRecord.model_validate(document)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        return None, reasons
    return record.model_dump(), None


class BatchLoader:
    """Buffers documents and writes them in sequential batches.

    Each batch has unordered semantics: invalid or conflicting documents are
    rejected individually and the rest of the batch still commits.
    """

    def __init__(self, session: Session, batch_size: int = INGEST_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.dao = TransactionDAO(session)
        self.batch_size = batch_size
        self.cleared = False
        self.batches = 0
        self.inserted = 0
        self.rejected = 0
        self._pending: List[Dict[str, Any]] = []

    def clear(self) -> int:
        """Delete every stored transaction before the new generation is loaded."""
        deleted = self.dao.delete_all()
        self.cleared = True
        logger.info("Cleared %d existing transactions", deleted)
        return deleted

    def add(self, document: Dict[str, Any]) -> None:
        self._pending.append(document)
        if len(self._pending) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        """Validate and insert whatever is buffered as one batch."""
        if not self._pending:
            return

        documents, self._pending = self._pending, []
        self.batches += 1

        records = []
        invalid = 0
        for document in documents:
            record, reason = validate_document(document)
            if record is None:
                invalid += 1
                logger.warning("Rejected transaction %s: %s", document.get("transaction_id"), reason)
            else:
                records.append(record)

        try:
            inserted, conflicts = self.dao.insert_batch(records)
        except StoreError as e:
            logger.error("Batch %d failed: %s", self.batches, e)
            raise BatchLoadError(self.batches, self.inserted, e) from e

        self.inserted += inserted
        self.rejected += invalid + conflicts
        logger.info(
            "Inserted batch %d: %d documents (%d rejected)", self.batches, inserted, invalid + conflicts
        )

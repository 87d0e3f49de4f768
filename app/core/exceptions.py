# app/core/exceptions.py
"""Domain exceptions for the sales explorer.

Everything raised on purpose by the query path or the ingestion pipeline
derives from SalesExplorerError, so callers can catch the whole family.
"""

from typing import List, Optional


class SalesExplorerError(Exception):
    """Base exception for all sales explorer errors."""

    pass


class QueryValidationError(SalesExplorerError):
    """Raised when list parameters are malformed or out of range.

    Carries every violated constraint, not just the first one found.
    """

    def __init__(self, errors: List[str], message: str = "Invalid query parameters"):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)


class StoreError(SalesExplorerError):
    """Raised when the record store cannot answer a query.

    ``retryable`` is set for timeouts and connectivity failures; the core
    never retries on its own.
    """

    def __init__(self, message: str, retryable: bool = False, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.operation = operation


class IngestionError(SalesExplorerError):
    """Raised when the ingestion source cannot be opened or read."""

    pass


class RowMappingError(IngestionError):
    """Raised when a single source row cannot be mapped to a record."""

    def __init__(self, row_number: int, reason: str):
        super().__init__(f"Row {row_number}: {reason}")
        self.row_number = row_number
        self.reason = reason


class SourceReadError(IngestionError):
    """Raised when the CSV source fails to parse partway through a run.

    ``inserted_so_far`` counts the documents already committed; when
    ``store_cleared`` is set the previous generation is gone.
    """

    def __init__(self, path: str, inserted_so_far: int, store_cleared: bool, cause: Exception):
        if store_cleared:
            message = f"Cannot read {path} after {inserted_so_far} inserted: {cause}"
        else:
            message = f"Cannot read {path}: {cause}"
        super().__init__(message)
        self.path = path
        self.inserted_so_far = inserted_so_far
        self.store_cleared = store_cleared
        self.cause = cause


class BatchLoadError(IngestionError):
    """Raised when a batch insert fails fatally.

    ``inserted_so_far`` counts the documents committed by earlier batches;
    those are not rolled back.
    """

    def __init__(self, batch_number: int, inserted_so_far: int, cause: Exception):
        super().__init__(f"Batch {batch_number} failed after {inserted_so_far} inserted: {cause}")
        self.batch_number = batch_number
        self.inserted_so_far = inserted_so_far
        self.cause = cause

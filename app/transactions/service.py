"""Service layer for querying sales transactions."""

import asyncio
import logging
import math
from typing import Any, Callable, List, Mapping, Optional, Union

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core.config import STORE_TIMEOUT_SECONDS
from app.core.exceptions import StoreError
from app.query import (
    ListQuery,
    Predicate,
    RawQueryParams,
    TransactionQueryBuilder,
    ensure_valid_query_params,
)
from app.transactions.catalog import FilterCatalog
from app.transactions.dao import TransactionDAO
from app.transactions.schemas import (
    FilterOptions,
    PaginationMeta,
    Statistics,
    TransactionListResponse,
    TransactionRead,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """List, filter-options and statistics operations over the transactions store.

    Each store read opens its own session from ``session_factory`` so the page
    fetch and the total count can run side by side.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        builder: Optional[TransactionQueryBuilder] = None,
        timeout: Optional[float] = STORE_TIMEOUT_SECONDS,
        catalog: Optional[FilterCatalog] = None,
    ):
        self.session_factory = session_factory
        self.builder = builder or TransactionQueryBuilder()
        self.timeout = timeout
        self.catalog = catalog or FilterCatalog(session_factory)

    # ===== LIST =====

    async def list_transactions(
        self, params: Union[RawQueryParams, Mapping[str, Any]], validate: bool = False
    ) -> TransactionListResponse:
        """Get one page of matching transactions plus pagination metadata.

        With ``validate`` set, malformed parameters raise QueryValidationError;
        otherwise they are coerced to defaults.
        """
        if not isinstance(params, RawQueryParams):
            params = RawQueryParams.from_mapping(dict(params))
        if validate:
            ensure_valid_query_params(params, max_limit=self.builder.max_limit)

        query = self.builder.build(params)

        try:
            records, total = await asyncio.wait_for(
                asyncio.gather(
                    run_in_threadpool(self._fetch_page, query),
                    run_in_threadpool(self._count, query.predicate),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Transaction listing timed out after %ss", self.timeout)
            raise StoreError(
                f"Listing timed out after {self.timeout}s", retryable=True, operation="list"
            ) from e

        window = query.window
        total_pages = math.ceil(total / window.limit) if total else 0
        pagination = PaginationMeta(
            current_page=window.page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=window.limit,
            has_next=window.page < total_pages,
            has_prev=window.page > 1,
        )
        logger.debug(
            "Listed %d of %d transactions (page %d/%d)", len(records), total, window.page, total_pages
        )
        return TransactionListResponse(data=records, pagination=pagination)

    def _fetch_page(self, query: ListQuery) -> List[TransactionRead]:
        with self.session_factory() as session:
            records = TransactionDAO(session).find(query)
            return [TransactionRead.model_validate(record) for record in records]

    def _count(self, predicate: Predicate) -> int:
        with self.session_factory() as session:
            return TransactionDAO(session).count_matching(predicate)

    # ===== FILTER OPTIONS =====

    def get_filter_options(self) -> FilterOptions:
        """Get the distinct values of every filterable dimension."""
        return self.catalog.get_options()

    # ===== STATISTICS =====

    def get_statistics(self) -> Statistics:
        """Get collection-wide totals; all zero on an empty store."""
        with self.session_factory() as session:
            totals = TransactionDAO(session).aggregate_statistics()
        return Statistics(**totals)

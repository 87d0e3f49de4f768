"""Filter catalog: the distinct values a client can filter the listing by."""

import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.transactions.dao import TransactionDAO
from app.transactions.schemas import FilterOptions

logger = logging.getLogger(__name__)

# FilterOptions field -> Transaction column
CATALOG_DIMENSIONS = {
    "customer_regions": "customer_region",
    "genders": "gender",
    "product_categories": "product_category",
    "payment_methods": "payment_method",
}


def _clean_sorted(values) -> List[str]:
    return sorted({str(value) for value in values if value is not None and str(value).strip() != ""})


class CatalogCache:
    """Process-wide cache of built catalogs, one per database.

    Each entry remembers the store generation it was built from and is only
    served while the store still reports that generation.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[int, FilterOptions]] = {}

    def get(self, key: str, generation: int) -> Optional[FilterOptions]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry[0] != generation:
            return None
        return entry[1]

    def put(self, key: str, generation: int, options: FilterOptions) -> None:
        with self._lock:
            self._entries[key] = (generation, options)


filter_catalog_cache = CatalogCache()


def cache_key_for(session: Session) -> str:
    bind = session.get_bind()
    return str(bind.url)


class FilterCatalog:
    """Builds FilterOptions from the store, through the cache."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        cache: CatalogCache = filter_catalog_cache,
    ):
        self.session_factory = session_factory
        self.cache = cache

    def get_options(self) -> FilterOptions:
        with self.session_factory() as session:
            key = cache_key_for(session)
            dao = TransactionDAO(session)
            generation = dao.current_generation()
            cached = self.cache.get(key, generation)
            if cached is not None:
                return cached

            options = self.build(dao)
            self.cache.put(key, generation, options)
            logger.info(
                "Filter catalog built for generation %d: %d regions, %d categories, %d tags",
                generation,
                len(options.customer_regions),
                len(options.product_categories),
                len(options.tags),
            )
            return options

    @staticmethod
    def build(dao: TransactionDAO) -> FilterOptions:
        values = {
            option: _clean_sorted(dao.distinct_values(column))
            for option, column in CATALOG_DIMENSIONS.items()
        }
        values["tags"] = _clean_sorted(dao.distinct_tags())
        return FilterOptions(**values)

"""
Query building schemas and types for the transactions listing.

The predicate tree defined here is store-agnostic: leaves name canonical
record attributes (``customer_region``, ``age``, ``tags``...) and only the
record store adapter knows how to turn them into SQL.
"""

from typing import Any, Optional, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SortField(str, Enum):
    """Fields the listing can be ordered by."""

    DATE = "date"
    QUANTITY = "quantity"
    CUSTOMER_NAME = "customerName"


class SortDirection(str, Enum):
    """Sort directions."""

    ASC = "asc"
    DESC = "desc"


# Canonical attribute each sort field orders on
SORT_ATTRIBUTES = {
    SortField.DATE: "date",
    SortField.QUANTITY: "quantity",
    SortField.CUSTOMER_NAME: "customer_name",
}


# ===== PREDICATE TREE =====


@dataclass(frozen=True)
class In:
    """Attribute value is a member of ``values``.

    For multi-valued attributes (tags) the record matches when any of its
    values is a member.
    """

    attribute: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match on a text attribute."""

    attribute: str
    text: str


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be open."""

    attribute: str
    lower: Optional[Union[int, float, datetime]] = None
    upper: Optional[Union[int, float, datetime]] = None

    def is_open(self) -> bool:
        return self.lower is None and self.upper is None


@dataclass(frozen=True)
class And:
    """All children must hold. An empty conjunction matches everything."""

    children: Tuple["Predicate", ...] = ()


@dataclass(frozen=True)
class Or:
    """At least one child must hold."""

    children: Tuple["Predicate", ...] = ()


Predicate = Union[In, Contains, Range, And, Or]

MATCH_ALL = And()


# ===== SORT AND WINDOW =====


@dataclass(frozen=True)
class SortSpec:
    """Normalized ordering for a listing."""

    field: SortField = SortField.DATE
    direction: SortDirection = SortDirection.DESC

    @property
    def attribute(self) -> str:
        return SORT_ATTRIBUTES[self.field]

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC


DEFAULT_SORT = SortSpec()


@dataclass(frozen=True)
class PageWindow:
    """1-based page number and size with the derived zero-based offset."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


# ===== RAW PARAMETERS =====


@dataclass
class RawQueryParams:
    """Request parameters as received, before any normalization.

    Multi-value filters may be absent, a scalar or a sequence; numeric and
    date fields are whatever text the caller sent.
    """

    search: Any = None
    customer_region: Any = None
    gender: Any = None
    product_category: Any = None
    tags: Any = None
    payment_method: Any = None
    age_min: Any = None
    age_max: Any = None
    date_from: Any = None
    date_to: Any = None
    sort_by: Any = None
    sort_order: Any = None
    page: Any = None
    limit: Any = None

    # camelCase names used on the wire
    WIRE_NAMES = {
        "search": "search",
        "customerRegion": "customer_region",
        "gender": "gender",
        "productCategory": "product_category",
        "tags": "tags",
        "paymentMethod": "payment_method",
        "ageMin": "age_min",
        "ageMax": "age_max",
        "dateFrom": "date_from",
        "dateTo": "date_to",
        "sortBy": "sort_by",
        "sortOrder": "sort_order",
        "page": "page",
        "limit": "limit",
    }

    @classmethod
    def from_mapping(cls, params: dict) -> "RawQueryParams":
        """Build from a mapping keyed by either wire names or attribute names."""
        values = {}
        for key, value in params.items():
            attribute = cls.WIRE_NAMES.get(key, key)
            if attribute in cls.__dataclass_fields__:
                values[attribute] = value
        return cls(**values)


@dataclass(frozen=True)
class ListQuery:
    """Everything the store needs to answer one listing request."""

    predicate: Predicate = MATCH_ALL
    sort: SortSpec = DEFAULT_SORT
    window: PageWindow = field(default_factory=lambda: PageWindow(page=1, limit=10))

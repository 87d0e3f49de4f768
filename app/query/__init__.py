"""
Query module for the transactions listing.

Main Components:
- TransactionQueryBuilder: turns raw request parameters into a ListQuery
- validate_query_params / ensure_valid_query_params: explicit parameter validation
- Schemas: the store-agnostic predicate tree, sort spec and page window
"""

from .builder import (
    TransactionQueryBuilder,
    ensure_valid_query_params,
    normalize_values,
    validate_query_params,
)
from .schemas import (
    # Predicate tree
    And,
    Contains,
    In,
    Or,
    Predicate,
    Range,
    # Core parameter and result types
    ListQuery,
    PageWindow,
    RawQueryParams,
    SortSpec,
    # Enums
    SortDirection,
    SortField,
)

__all__ = [
    # Main classes
    "TransactionQueryBuilder",
    "ensure_valid_query_params",
    "normalize_values",
    "validate_query_params",
    # Predicate tree
    "And",
    "Contains",
    "In",
    "Or",
    "Predicate",
    "Range",
    # Core parameter and result types
    "ListQuery",
    "PageWindow",
    "RawQueryParams",
    "SortSpec",
    # Enums
    "SortDirection",
    "SortField",
]

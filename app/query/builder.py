"""
TransactionQueryBuilder turns loosely-typed listing parameters into a ListQuery.

This is the single place where request parameters are interpreted. Both the
HTTP route and direct service callers go through it, so the scalar-or-list
ambiguity of the incoming filters never travels further than this module.
"""

from typing import Any, Iterable, List, Optional, Tuple
from datetime import date, datetime, time

from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.exceptions import QueryValidationError
from .schemas import (
    And,
    Contains,
    DEFAULT_SORT,
    In,
    ListQuery,
    Or,
    PageWindow,
    Predicate,
    Range,
    RawQueryParams,
    SortDirection,
    SortField,
    SortSpec,
)

END_OF_DAY = time(23, 59, 59, 999000)

# Largest value bound into the store for page numbers and age bounds
MAX_INT32 = 2**31 - 1

# Request parameter -> canonical attribute for the multi-select filters
MULTI_VALUE_FILTERS = (
    ("customer_region", "customer_region"),
    ("gender", "gender"),
    ("product_category", "product_category"),
    ("tags", "tags"),
    ("payment_method", "payment_method"),
)

SEARCH_ATTRIBUTES = ("customer_name", "phone_number")


# ===== COERCION HELPERS =====


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _first_scalar(value: Any) -> Any:
    """Collapse a repeated parameter to its first value."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def normalize_values(value: Any) -> Tuple[str, ...]:
    """Coerce an absent, scalar or sequence filter value to an ordered, de-duplicated tuple."""
    if value is None:
        return ()
    if isinstance(value, (str, int, float)):
        candidates: Iterable[Any] = [value]
    else:
        candidates = value

    seen = []
    for candidate in candidates:
        if _is_blank(candidate):
            continue
        text = str(candidate)
        if text not in seen:
            seen.append(text)
    return tuple(seen)


def parse_int(value: Any) -> Optional[int]:
    """Parse an integer the lenient way: '25', 25, '25.9' -> 25; junk -> None."""
    value = _first_scalar(value)
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def parse_date(value: Any) -> Optional[date]:
    """Parse YYYY-MM-DD (or a full ISO timestamp) to a calendar date; junk -> None."""
    value = _first_scalar(value)
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def clamp_int(value: Optional[int], limit: int = MAX_INT32) -> Optional[int]:
    """Pull an integer into [-limit, limit]; None stays None."""
    if value is None:
        return None
    return max(-limit, min(value, limit))


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


# ===== BUILDER =====


class TransactionQueryBuilder:
    """Builds predicates, sort specs and page windows for the transactions listing."""

    def __init__(self, default_limit: int = DEFAULT_PAGE_SIZE, max_limit: int = MAX_PAGE_SIZE):
        self.default_limit = default_limit
        self.max_limit = max_limit

    def build(self, params: RawQueryParams) -> ListQuery:
        """Build the complete listing query, coercing bad input to defaults."""
        return ListQuery(
            predicate=self.build_predicate(params),
            sort=self.build_sort(params.sort_by, params.sort_order),
            window=self.build_window(params.page, params.limit),
        )

    def build_predicate(self, params: RawQueryParams) -> Predicate:
        """Combine every active filter into one conjunction."""
        conjuncts: List[Predicate] = []

        search = _first_scalar(params.search)
        if not _is_blank(search):
            term = str(search).strip()
            conjuncts.append(Or(tuple(Contains(attribute, term) for attribute in SEARCH_ATTRIBUTES)))

        for param_name, attribute in MULTI_VALUE_FILTERS:
            values = normalize_values(getattr(params, param_name))
            if values:
                conjuncts.append(In(attribute, values))

        age_range = Range(
            "age", clamp_int(parse_int(params.age_min)), clamp_int(parse_int(params.age_max))
        )
        if not age_range.is_open():
            conjuncts.append(age_range)

        date_from = parse_date(params.date_from)
        date_to = parse_date(params.date_to)
        date_range = Range(
            "date",
            start_of_day(date_from) if date_from else None,
            end_of_day(date_to) if date_to else None,
        )
        if not date_range.is_open():
            conjuncts.append(date_range)

        return And(tuple(conjuncts))

    def build_sort(self, sort_by: Any, sort_order: Any) -> SortSpec:
        """Map sortBy/sortOrder to a SortSpec; unknown fields fall back to newest first."""
        sort_by = _first_scalar(sort_by)
        try:
            sort_field = SortField(sort_by)
        except ValueError:
            return DEFAULT_SORT

        direction = SortDirection.ASC if _first_scalar(sort_order) == "asc" else SortDirection.DESC
        return SortSpec(field=sort_field, direction=direction)

    def build_window(self, page: Any, limit: Any) -> PageWindow:
        """Coerce page/limit to a usable window instead of failing."""
        page_number = parse_int(page)
        if page_number is None or page_number < 1:
            page_number = 1
        page_number = min(page_number, MAX_INT32)

        page_size = parse_int(limit)
        if page_size is None or page_size < 1:
            page_size = self.default_limit
        page_size = min(page_size, self.max_limit)

        return PageWindow(page=page_number, limit=page_size)


# ===== VALIDATION =====


def _is_whole_number(value: Any) -> bool:
    value = _first_scalar(value)
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    try:
        int(str(value).strip())
        return True
    except ValueError:
        return False


def validate_query_params(params: RawQueryParams, max_limit: int = MAX_PAGE_SIZE) -> List[str]:
    """Return every violated constraint; an empty list means the parameters are valid."""
    errors: List[str] = []

    if not _is_blank(_first_scalar(params.page)):
        if not _is_whole_number(params.page) or parse_int(params.page) < 1:
            errors.append("Page must be a positive number")

    if not _is_blank(_first_scalar(params.limit)):
        limit = parse_int(params.limit) if _is_whole_number(params.limit) else None
        if limit is None or limit < 1 or limit > max_limit:
            errors.append(f"Limit must be between 1 and {max_limit}")

    age_min = parse_int(params.age_min)
    age_max = parse_int(params.age_max)
    if not _is_blank(_first_scalar(params.age_min)) and age_min is None:
        errors.append("ageMin must be a number")
    if not _is_blank(_first_scalar(params.age_max)) and age_max is None:
        errors.append("ageMax must be a number")
    if age_min is not None and age_max is not None and age_min > age_max:
        errors.append("ageMin cannot be greater than ageMax")

    date_from = parse_date(params.date_from)
    date_to = parse_date(params.date_to)
    if not _is_blank(_first_scalar(params.date_from)) and date_from is None:
        errors.append("dateFrom must be a valid date")
    if not _is_blank(_first_scalar(params.date_to)) and date_to is None:
        errors.append("dateTo must be a valid date")
    if date_from is not None and date_to is not None and date_from > date_to:
        errors.append("dateFrom cannot be after dateTo")

    sort_by = _first_scalar(params.sort_by)
    valid_sort_fields = [f.value for f in SortField]
    if not _is_blank(sort_by) and sort_by not in valid_sort_fields:
        errors.append(f"sortBy must be one of: {', '.join(valid_sort_fields)}")

    sort_order = _first_scalar(params.sort_order)
    valid_sort_orders = [d.value for d in SortDirection]
    if not _is_blank(sort_order) and sort_order not in valid_sort_orders:
        errors.append(f"sortOrder must be one of: {', '.join(valid_sort_orders)}")

    return errors


def ensure_valid_query_params(params: RawQueryParams, max_limit: int = MAX_PAGE_SIZE) -> None:
    """Raise QueryValidationError listing all violations, if any."""
    errors = validate_query_params(params, max_limit=max_limit)
    if errors:
        raise QueryValidationError(errors)

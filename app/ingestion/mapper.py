"""Mapping of source CSV rows onto the canonical transaction record.

Values that cannot be parsed are passed through as their raw text, so the
record is rejected by ``TransactionRecord`` validation at load time instead
of aborting the row here.
"""

import math
from typing import Any, Dict, List, Mapping, Optional, Union
from datetime import datetime

import pandas as pd

from app.core.exceptions import RowMappingError

# Source column label -> canonical field, for the plain text fields
TEXT_COLUMNS = {
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

INTEGER_COLUMNS = {
    "Age": "age",
    "Quantity": "quantity",
}

DECIMAL_COLUMNS = {
    "Price per Unit": "price_per_unit",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
}

TRANSACTION_ID_COLUMN = "Transaction ID"
DATE_COLUMN = "Date"
TAGS_COLUMN = "Tags"
DISCOUNT_COLUMN = "Discount Percentage"


# ===== FIELD PARSERS =====


def clean_text(value: Any) -> Optional[str]:
    """Blank or missing -> None, anything else -> its string form."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value)
    return text if text.strip() else None


def parse_integer(value: Any) -> Union[int, str, None]:
    text = clean_text(value)
    if text is None:
        return None
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        # Decimals truncate toward zero
        return int(float(text))
    except (ValueError, OverflowError):
        return text


def parse_decimal(value: Any) -> Union[float, str, None]:
    text = clean_text(value)
    if text is None:
        return None
    try:
        number = float(text.strip())
    except ValueError:
        return text
    return number if math.isfinite(number) else text


def parse_timestamp(value: Any, default: datetime) -> Union[datetime, str]:
    text = clean_text(value)
    if text is None:
        return default
    parsed = pd.to_datetime(text.strip(), errors="coerce")
    if pd.isna(parsed):
        return text
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC").tz_localize(None)
    return parsed.to_pydatetime()


def split_tags(value: Any) -> List[str]:
    text = clean_text(value)
    if text is None:
        return []
    tags: List[str] = []
    for tag in text.split(","):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


# ===== ROW MAPPING =====


def map_row(row: Mapping[str, Any], ordinal: int, ingested_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Map one source row (keyed by column label) to a canonical document.

    ``ordinal`` is the 1-based data row number and names rows that carry no
    transaction ID.
    """
    ingested_at = ingested_at or datetime.now()
    try:
        document: Dict[str, Any] = {
            "transaction_id": clean_text(row.get(TRANSACTION_ID_COLUMN)) or f"TXN-{ordinal}",
            "date": parse_timestamp(row.get(DATE_COLUMN), ingested_at),
            "tags": split_tags(row.get(TAGS_COLUMN)),
        }
        for label, field in TEXT_COLUMNS.items():
            document[field] = clean_text(row.get(label))
        for label, field in INTEGER_COLUMNS.items():
            document[field] = parse_integer(row.get(label))
        for label, field in DECIMAL_COLUMNS.items():
            document[field] = parse_decimal(row.get(label))

        discount = parse_decimal(row.get(DISCOUNT_COLUMN))
        document["discount_percentage"] = 0 if discount is None else discount
    except (AttributeError, TypeError, ValueError) as e:
        raise RowMappingError(ordinal, str(e)) from e

    return document

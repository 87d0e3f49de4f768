"""Pydantic schemas for the transactions module.

Response models serialize with the camelCase names the frontend already
uses (``transactionID``, ``customerName``, ``pricePerUnit``...).
"""

from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_wire_name(field_name: str) -> str:
    """snake_case -> camelCase, with a trailing ``id`` written as ``ID``."""
    head, *rest = field_name.split("_")
    parts = [head] + [("ID" if part == "id" else part.capitalize()) for part in rest]
    return "".join(parts)


class WireModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_wire_name,
        populate_by_name=True,
    )


# ===== CANONICAL RECORD =====


class TransactionRecord(BaseModel):
    """Canonical sales record as produced by ingestion, validated before insert."""

    transaction_id: Optional[str] = None
    date: Optional[datetime] = None

    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    customer_region: Optional[str] = None
    customer_type: Optional[Literal["New", "Returning", "Loyal"]] = None

    product_id: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    product_category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    quantity: Optional[int] = Field(None, ge=0)
    price_per_unit: Optional[float] = Field(None, ge=0)
    discount_percentage: float = Field(0, ge=0, le=100)
    total_amount: Optional[float] = Field(None, ge=0)
    final_amount: Optional[float] = Field(None, ge=0)

    payment_method: Optional[str] = None
    order_status: Optional[str] = None
    delivery_type: Optional[str] = None
    store_id: Optional[str] = None
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = None
    employee_name: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("customer_name", "product_name", "brand", "employee_name")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None

    @field_validator("discount_percentage", mode="before")
    @classmethod
    def default_discount(cls, v):
        return 0 if v is None else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        cleaned: List[str] = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in cleaned:
                cleaned.append(tag)
        return cleaned


# ===== RESPONSES =====


class TransactionRead(WireModel):
    transaction_id: Optional[str] = None
    date: Optional[datetime] = None

    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    customer_region: Optional[str] = None
    customer_type: Optional[str] = None

    product_id: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    product_category: Optional[str] = None
    tags: List[str] = []

    quantity: Optional[int] = None
    price_per_unit: Optional[float] = None
    discount_percentage: Optional[float] = None
    total_amount: Optional[float] = None
    final_amount: Optional[float] = None

    payment_method: Optional[str] = None
    order_status: Optional[str] = None
    delivery_type: Optional[str] = None
    store_id: Optional[str] = None
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = None
    employee_name: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaginationMeta(WireModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool


class TransactionListResponse(WireModel):
    success: bool = True
    data: List[TransactionRead]
    pagination: PaginationMeta


class FilterOptions(WireModel):
    """Distinct values per filterable dimension, sorted."""

    customer_regions: List[str] = []
    genders: List[str] = []
    product_categories: List[str] = []
    tags: List[str] = []
    payment_methods: List[str] = []


class FilterOptionsResponse(WireModel):
    success: bool = True
    data: FilterOptions


class Statistics(WireModel):
    total_transactions: int = 0
    total_revenue: float = 0
    total_discount: float = 0
    avg_quantity: float = 0


class StatisticsResponse(WireModel):
    success: bool = True
    data: Statistics


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[str]] = None

# app/transactions/router.py
"""API router for the transactions module."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import SessionFactoryDep
from app.query import RawQueryParams
from app.transactions.service import TransactionService
from app.transactions.schemas import (
    ErrorResponse,
    FilterOptionsResponse,
    StatisticsResponse,
    TransactionListResponse,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


# ===== DEPENDENCY INJECTION =====


def get_transaction_service(session_factory: SessionFactoryDep) -> TransactionService:
    """Get TransactionService instance."""
    return TransactionService(session_factory)


# ===== ENDPOINTS =====


@router.get(
    "",
    response_model=TransactionListResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def list_transactions(
    search: Optional[str] = Query(None, description="Matches customer name or phone number"),
    customer_region: Optional[List[str]] = Query(None, alias="customerRegion"),
    gender: Optional[List[str]] = Query(None),
    product_category: Optional[List[str]] = Query(None, alias="productCategory"),
    tags: Optional[List[str]] = Query(None),
    payment_method: Optional[List[str]] = Query(None, alias="paymentMethod"),
    age_min: Optional[str] = Query(None, alias="ageMin"),
    age_max: Optional[str] = Query(None, alias="ageMax"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="date, quantity or customerName"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    """Get a filtered, sorted page of transactions."""
    params = RawQueryParams(
        search=search,
        customer_region=customer_region,
        gender=gender,
        product_category=product_category,
        tags=tags,
        payment_method=payment_method,
        age_min=age_min,
        age_max=age_max,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return await service.list_transactions(params, validate=True)


@router.get("/filters", response_model=FilterOptionsResponse)
def get_filter_options(
    service: TransactionService = Depends(get_transaction_service),
) -> FilterOptionsResponse:
    """Get the distinct values available for each filter."""
    return FilterOptionsResponse(data=service.get_filter_options())


@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(
    service: TransactionService = Depends(get_transaction_service),
) -> StatisticsResponse:
    """Get collection-wide sales statistics."""
    return StatisticsResponse(data=service.get_statistics())

"""
Unit tests for the transactions service.
Tests pagination metadata, concurrent reads, timeouts and the filter catalog cache.
"""

import asyncio
import pytest
from unittest.mock import MagicMock, Mock, patch

from app.core.exceptions import QueryValidationError, StoreError
from app.query import RawQueryParams
from app.transactions.catalog import CatalogCache, FilterCatalog
from app.transactions.schemas import FilterOptions
from app.transactions.service import TransactionService


class TestListTransactions:
    """Test the list operation with a mocked DAO"""

    @pytest.fixture
    def mock_dao(self):
        dao = Mock()
        dao.find = Mock(return_value=[])
        dao.count_matching = Mock(return_value=23)
        return dao

    @pytest.fixture
    def service(self, mock_dao):
        with patch("app.transactions.service.TransactionDAO", return_value=mock_dao):
            yield TransactionService(MagicMock(), timeout=5)

    async def test_pagination_metadata(self, service):
        response = await service.list_transactions({"page": "1", "limit": "10"})
        assert response.success is True
        assert response.pagination.total_items == 23
        assert response.pagination.total_pages == 3
        assert response.pagination.current_page == 1
        assert response.pagination.items_per_page == 10
        assert response.pagination.has_next is True
        assert response.pagination.has_prev is False

    async def test_last_page(self, service):
        response = await service.list_transactions(RawQueryParams(page="3", limit="10"))
        assert response.pagination.has_next is False
        assert response.pagination.has_prev is True

    async def test_empty_result_has_zero_pages(self, service, mock_dao):
        mock_dao.count_matching.return_value = 0
        response = await service.list_transactions({})
        assert response.data == []
        assert response.pagination.total_pages == 0
        assert response.pagination.has_next is False
        assert response.pagination.has_prev is False

    async def test_find_and_count_share_the_predicate(self, service, mock_dao):
        await service.list_transactions({"customerRegion": "North", "sortBy": "quantity"})
        query = mock_dao.find.call_args.args[0]
        assert mock_dao.count_matching.call_args.args[0] == query.predicate
        assert query.sort.attribute == "quantity"

    async def test_bad_parameters_are_coerced_by_default(self, service, mock_dao):
        response = await service.list_transactions({"page": "-1", "limit": "abc"})
        assert response.pagination.current_page == 1
        assert response.pagination.items_per_page == 10

    async def test_bad_parameters_raise_when_validating(self, service, mock_dao):
        with pytest.raises(QueryValidationError):
            await service.list_transactions({"limit": "1000"}, validate=True)
        mock_dao.find.assert_not_called()

    async def test_failure_in_either_read_aborts(self, service, mock_dao):
        mock_dao.count_matching.side_effect = StoreError("boom", retryable=True, operation="count")
        with pytest.raises(StoreError):
            await service.list_transactions({})

    async def test_timeout_is_retryable_store_error(self, mock_dao):
        async def slow_read(func, *args):
            await asyncio.sleep(1)

        with patch("app.transactions.service.run_in_threadpool", side_effect=slow_read):
            service = TransactionService(MagicMock(), timeout=0.05)
            with pytest.raises(StoreError) as exc_info:
                await service.list_transactions({})
        assert exc_info.value.retryable is True
        assert exc_info.value.operation == "list"


class TestFilterCatalog:
    """Test catalog construction and caching"""

    @pytest.fixture
    def mock_dao(self):
        dao = Mock()
        dao.distinct_values = Mock(
            side_effect=lambda column: {
                "customer_region": ["South", None, "North", ""],
                "gender": ["Male", "Female"],
                "product_category": ["Clothing"],
                "payment_method": ["UPI", "Cash"],
            }[column]
        )
        dao.distinct_tags = Mock(return_value=["premium", " ", "gaming"])
        dao.current_generation = Mock(return_value=0)
        return dao

    def test_build_sorts_and_drops_empty_values(self, mock_dao):
        options = FilterCatalog.build(mock_dao)
        assert options == FilterOptions(
            customer_regions=["North", "South"],
            genders=["Female", "Male"],
            product_categories=["Clothing"],
            tags=["gaming", "premium"],
            payment_methods=["Cash", "UPI"],
        )

    def test_options_are_cached_per_generation(self, session_factory, mock_dao):
        catalog = FilterCatalog(session_factory, cache=CatalogCache())
        with patch("app.transactions.catalog.TransactionDAO", return_value=mock_dao):
            catalog.get_options()
            catalog.get_options()
            assert mock_dao.distinct_tags.call_count == 1

            mock_dao.current_generation.return_value = 1
            catalog.get_options()
            assert mock_dao.distinct_tags.call_count == 2

    def test_cache_ignores_entries_from_another_generation(self):
        cache = CatalogCache()
        options = FilterOptions(genders=["Female"])
        cache.put("sqlite:///sales.db", 3, options)
        assert cache.get("sqlite:///sales.db", 3) is options
        assert cache.get("sqlite:///sales.db", 4) is None
        assert cache.get("sqlite:///other.db", 3) is None

"""
Unit tests for the transactions DAO.
Runs predicate translation, paging, aggregation and bulk loading against SQLite.
"""

import pytest
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError, ProgrammingError

from app.core.exceptions import StoreError
from app.query import And, Contains, In, Or, Range
from app.query.schemas import ListQuery, PageWindow, SortDirection, SortField, SortSpec
from app.transactions.dao import TransactionDAO


def ids(records):
    return [record.transaction_id for record in records]


class TestPredicateTranslation:
    """Test the predicate tree against stored rows"""

    def count(self, db_session, predicate):
        return TransactionDAO(db_session).count_matching(predicate)

    def test_empty_conjunction_matches_all(self, db_session, sample_transactions):
        assert self.count(db_session, And()) == 6

    def test_empty_disjunction_matches_nothing(self, db_session, sample_transactions):
        assert self.count(db_session, Or()) == 0

    def test_contains_is_case_insensitive(self, db_session, sample_transactions):
        assert self.count(db_session, Contains("customer_name", "ALICE")) == 2

    def test_contains_matches_phone_substring(self, db_session, sample_transactions):
        assert self.count(db_session, Contains("phone_number", "5551")) == 1

    def test_contains_treats_wildcards_literally(self, db_session, sample_transactions):
        assert self.count(db_session, Contains("customer_name", "%")) == 0
        assert self.count(db_session, Contains("customer_name", "_")) == 0

    def test_in_filter(self, db_session, sample_transactions):
        assert self.count(db_session, In("customer_region", ("North", "East"))) == 3

    def test_tags_match_any_member(self, db_session, sample_transactions):
        assert self.count(db_session, In("tags", ("premium",))) == 3
        assert self.count(db_session, In("tags", ("gaming", "cotton"))) == 2

    def test_range_is_inclusive(self, db_session, sample_transactions):
        assert self.count(db_session, Range("age", 25, 35)) == 4
        assert self.count(db_session, Range("age", 45, None)) == 1

    def test_unknown_attribute_is_rejected(self, db_session):
        with pytest.raises(ValueError):
            TransactionDAO(db_session).to_clause(In("store_location", ("Mumbai",)))


class TestFind:
    """Test paged, sorted retrieval"""

    def test_default_order_is_newest_first(self, db_session, sample_transactions):
        records = TransactionDAO(db_session).find(ListQuery())
        assert ids(records) == ["TXN-6", "TXN-5", "TXN-4", "TXN-3", "TXN-2", "TXN-1"]

    def test_window_and_sort(self, db_session, sample_transactions):
        query = ListQuery(
            sort=SortSpec(SortField.QUANTITY, SortDirection.ASC),
            window=PageWindow(page=2, limit=2),
        )
        records = TransactionDAO(db_session).find(query)
        # quantity order: TXN-3, TXN-6 (tie on 1, by primary key), TXN-1, TXN-4, TXN-5, TXN-2
        assert ids(records) == ["TXN-1", "TXN-4"]

    def test_tags_are_loaded_in_order(self, db_session, sample_transactions):
        query = ListQuery(predicate=In("customer_region", ("East",)))
        (record,) = TransactionDAO(db_session).find(query)
        assert record.tags == ["organic", "premium"]


class TestAggregation:
    """Test collection-wide statistics"""

    def test_empty_store_is_all_zero(self, db_session):
        assert TransactionDAO(db_session).aggregate_statistics() == {
            "total_transactions": 0,
            "total_revenue": 0.0,
            "total_discount": 0.0,
            "avg_quantity": 0.0,
        }

    def test_statistics(self, db_session, sample_transactions):
        stats = TransactionDAO(db_session).aggregate_statistics()
        assert stats["total_transactions"] == 6
        assert stats["total_revenue"] == pytest.approx(715.0)
        assert stats["total_discount"] == pytest.approx(75.0)
        assert stats["avg_quantity"] == pytest.approx(16 / 6)

    def test_missing_quantity_is_skipped_by_average(self, db_session, seed_transactions, document_factory):
        seed_transactions(
            [
                document_factory(transaction_id="A", quantity=2),
                document_factory(transaction_id="B", quantity=None),
            ]
        )
        stats = TransactionDAO(db_session).aggregate_statistics()
        assert stats["total_transactions"] == 2
        assert stats["avg_quantity"] == pytest.approx(2.0)


class TestBulkLoad:
    """Test batch insert and delete-all"""

    def test_duplicate_ids_do_not_block_the_batch(self, db_session, document_factory):
        dao = TransactionDAO(db_session)
        inserted, rejected = dao.insert_batch(
            [
                document_factory(transaction_id="DUP"),
                document_factory(transaction_id="DUP"),
                document_factory(transaction_id="OTHER"),
            ]
        )
        assert (inserted, rejected) == (2, 1)
        assert dao.count_matching(And()) == 2

    def test_missing_ids_are_not_unique(self, db_session, document_factory):
        dao = TransactionDAO(db_session)
        inserted, rejected = dao.insert_batch(
            [document_factory(transaction_id=None), document_factory(transaction_id=None)]
        )
        assert (inserted, rejected) == (2, 0)

    def test_empty_batch(self, db_session):
        assert TransactionDAO(db_session).insert_batch([]) == (0, 0)

    def test_delete_all_removes_records_and_tags(self, db_session, sample_transactions):
        dao = TransactionDAO(db_session)
        assert dao.delete_all() == 6
        assert dao.count_matching(And()) == 0
        assert dao.distinct_tags() == []

    def test_distinct_values(self, db_session, sample_transactions):
        dao = TransactionDAO(db_session)
        assert sorted(dao.distinct_values("gender")) == ["Female", "Male"]
        assert sorted(dao.distinct_tags()) == ["cotton", "gaming", "organic", "premium", "wireless"]


class TestStoreGeneration:
    """Test the ingestion generation counter"""

    def test_starts_at_zero(self, db_session):
        assert TransactionDAO(db_session).current_generation() == 0

    def test_advance_is_seen_by_other_sessions(self, session_factory):
        with session_factory() as session:
            dao = TransactionDAO(session)
            assert dao.advance_generation() == 1
            assert dao.advance_generation() == 2

        with session_factory() as session:
            assert TransactionDAO(session).current_generation() == 2


class TestStoreErrors:
    """Test translation of SQLAlchemy failures"""

    def test_operational_error_is_retryable(self):
        session = Mock()
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with pytest.raises(StoreError) as exc_info:
            TransactionDAO(session).count_matching(And())
        assert exc_info.value.retryable is True
        assert exc_info.value.operation == "count"
        session.rollback.assert_called_once()

    def test_other_errors_are_not_retryable(self):
        session = Mock()
        session.execute.side_effect = ProgrammingError("SELECT 1", {}, Exception("no such table"))
        with pytest.raises(StoreError) as exc_info:
            TransactionDAO(session).aggregate_statistics()
        assert exc_info.value.retryable is False

"""Record store adapter for sales transactions.

This is the only module that knows how the predicate tree from
``app.query`` maps onto SQL.
"""

import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import and_, delete, false, func, or_, select, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.base_dao import BaseDAO, store_operation
from app.query.schemas import And, Contains, In, ListQuery, Or, Predicate, Range
from app.transactions.models import StoreGeneration, Transaction, TransactionTag

logger = logging.getLogger(__name__)

# Canonical attribute -> column, for the attributes the listing filters or sorts on
FILTERABLE_COLUMNS = {
    "customer_name": Transaction.customer_name,
    "phone_number": Transaction.phone_number,
    "customer_region": Transaction.customer_region,
    "gender": Transaction.gender,
    "age": Transaction.age,
    "product_category": Transaction.product_category,
    "payment_method": Transaction.payment_method,
    "quantity": Transaction.quantity,
    "date": Transaction.date,
}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TransactionDAO(BaseDAO[Transaction]):
    """DAO for the transactions collection."""

    def __init__(self, db_session: Session):
        super().__init__(Transaction, db_session)

    # ===== PREDICATE TRANSLATION =====

    def to_clause(self, predicate: Predicate):
        """Translate a predicate tree into a SQLAlchemy boolean clause."""
        if isinstance(predicate, And):
            if not predicate.children:
                return true()
            return and_(*(self.to_clause(child) for child in predicate.children))

        if isinstance(predicate, Or):
            if not predicate.children:
                return false()
            return or_(*(self.to_clause(child) for child in predicate.children))

        if isinstance(predicate, In):
            if predicate.attribute == "tags":
                return Transaction.tag_rows.any(TransactionTag.tag.in_(predicate.values))
            return self._column(predicate.attribute).in_(predicate.values)

        if isinstance(predicate, Contains):
            pattern = f"%{_escape_like(predicate.text)}%"
            return self._column(predicate.attribute).ilike(pattern, escape="\\")

        if isinstance(predicate, Range):
            column = self._column(predicate.attribute)
            conditions = []
            if predicate.lower is not None:
                conditions.append(column >= predicate.lower)
            if predicate.upper is not None:
                conditions.append(column <= predicate.upper)
            return and_(*conditions) if conditions else true()

        raise TypeError(f"Unsupported predicate: {predicate!r}")

    def _column(self, attribute: str):
        try:
            return FILTERABLE_COLUMNS[attribute]
        except KeyError:
            raise ValueError(f"Attribute '{attribute}' cannot be queried") from None

    # ===== QUERY METHODS =====

    @store_operation("find")
    def find(self, query: ListQuery) -> List[Transaction]:
        """Get one page of matching transactions with tags loaded."""
        sort_column = self._column(query.sort.attribute)
        if query.sort.descending:
            ordering = (sort_column.desc(), Transaction.id.desc())
        else:
            ordering = (sort_column.asc(), Transaction.id.asc())

        stmt = (
            select(Transaction)
            .options(selectinload(Transaction.tag_rows))
            .where(self.to_clause(query.predicate))
            .order_by(*ordering)
            .offset(query.window.skip)
            .limit(query.window.limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    @store_operation("count")
    def count_matching(self, predicate: Predicate) -> int:
        """Count transactions matching a predicate."""
        stmt = select(func.count()).select_from(Transaction).where(self.to_clause(predicate))
        return self.db.execute(stmt).scalar_one()

    @store_operation("distinct")
    def distinct_tags(self) -> List[str]:
        """Distinct tag values across all transactions."""
        stmt = select(TransactionTag.tag).distinct()
        return list(self.db.execute(stmt).scalars().all())

    @store_operation("aggregate")
    def aggregate_statistics(self) -> Dict[str, Any]:
        """Collection-wide totals in a single statement.

        The discount is summed per record as total_amount * pct / 100; rows
        with a null operand contribute nothing to that sum.
        """
        stmt = select(
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.final_amount), 0),
            func.coalesce(
                func.sum(Transaction.total_amount * Transaction.discount_percentage / 100.0), 0
            ),
            func.coalesce(func.avg(Transaction.quantity), 0),
        )
        total, revenue, discount, avg_quantity = self.db.execute(stmt).one()
        return {
            "total_transactions": int(total or 0),
            "total_revenue": float(revenue or 0),
            "total_discount": float(discount or 0),
            "avg_quantity": float(avg_quantity or 0),
        }

    # ===== BULK REPLACE =====

    @store_operation("delete_all")
    def delete_all(self) -> int:
        """Remove every transaction and its tags in one transaction."""
        self.db.execute(delete(TransactionTag))
        return super().delete_all()

    @store_operation("insert_batch")
    def insert_batch(self, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        """Insert a batch with unordered semantics.

        The batch is first written in one go. If that hits an integrity
        conflict, every document is retried on its own so a single bad
        document does not keep the rest out. Returns (inserted, rejected).
        """
        if not records:
            return 0, 0

        try:
            self.db.add_all([self._to_model(record) for record in records])
            self.db.commit()
            return len(records), 0
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Batch insert conflict, retrying documents one by one: %s", e.orig)

        inserted = 0
        rejected = 0
        for record in records:
            try:
                self.db.add(self._to_model(record))
                self.db.commit()
                inserted += 1
            except IntegrityError as e:
                self.db.rollback()
                rejected += 1
                logger.warning(
                    "Rejected transaction %s: %s", record.get("transaction_id"), e.orig
                )
        return inserted, rejected

    # ===== STORE GENERATION =====

    @store_operation("generation")
    def current_generation(self) -> int:
        """Generation of the loaded data; 0 before the first ingestion run."""
        stmt = select(StoreGeneration.generation).where(StoreGeneration.id == 1)
        return self.db.execute(stmt).scalar() or 0

    @store_operation("generation")
    def advance_generation(self) -> int:
        """Bump the generation and commit. Returns the new value."""
        result = self.db.execute(
            update(StoreGeneration)
            .where(StoreGeneration.id == 1)
            .values(generation=StoreGeneration.generation + 1)
        )
        if not result.rowcount:
            self.db.add(StoreGeneration(id=1, generation=1))
        self.db.commit()
        return self.current_generation()

    @staticmethod
    def _to_model(record: Dict[str, Any]) -> Transaction:
        fields = dict(record)
        tags = fields.pop("tags", None) or []
        transaction = Transaction(**fields)
        transaction.tag_rows = [
            TransactionTag(position=position, tag=tag) for position, tag in enumerate(tags)
        ]
        return transaction

"""Database models for the transactions module."""

from typing import List

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Transaction(Base):
    """One retail sales transaction.

    ``transaction_id`` is unique but nullable, so uniqueness only applies to
    the rows that carry one.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String, unique=True, nullable=True, index=True)
    date = Column(DateTime, index=True)

    # Customer fields
    customer_id = Column(String, index=True)
    customer_name = Column(String, index=True)
    phone_number = Column(String, index=True)
    gender = Column(String, index=True)
    age = Column(Integer, index=True)
    customer_region = Column(String, index=True)
    customer_type = Column(String, index=True)

    # Product fields
    product_id = Column(String, index=True)
    product_name = Column(String)
    brand = Column(String)
    product_category = Column(String, index=True)

    # Sales fields
    quantity = Column(Integer, index=True)
    price_per_unit = Column(Float)
    discount_percentage = Column(Float, nullable=False, default=0)
    total_amount = Column(Float)
    final_amount = Column(Float)

    # Operational fields
    payment_method = Column(String, index=True)
    order_status = Column(String, index=True)
    delivery_type = Column(String)
    store_id = Column(String, index=True)
    store_location = Column(String)
    salesperson_id = Column(String, index=True)
    employee_name = Column(String)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tag_rows = relationship(
        "TransactionTag",
        back_populates="transaction",
        order_by="TransactionTag.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("IX_transactions_date_customer_name", "date", "customer_name"),
        Index("IX_transactions_region_category", "customer_region", "product_category"),
        Index("IX_transactions_date_quantity", "date", "quantity"),
    )

    @property
    def tags(self) -> List[str]:
        """Tag values in their original order."""
        return [row.tag for row in self.tag_rows]

    def __repr__(self):
        return f"<Transaction(id={self.id}, transaction_id='{self.transaction_id}', date={self.date})>"


class TransactionTag(Base):
    """A single tag of a transaction, kept in source order."""

    __tablename__ = "transaction_tags"

    transaction_pk = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True
    )
    position = Column(Integer, primary_key=True)
    tag = Column(String, nullable=False, index=True)

    transaction = relationship("Transaction", back_populates="tag_rows")

    def __repr__(self):
        return f"<TransactionTag(transaction_pk={self.transaction_pk}, position={self.position}, tag='{self.tag}')>"


class StoreGeneration(Base):
    """Single-row counter bumped by every ingestion run.

    Readers that cache derived data compare against it, so a load done by
    another process is noticed without restarting the server.
    """

    __tablename__ = "store_generation"

    id = Column(Integer, primary_key=True)
    generation = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<StoreGeneration(generation={self.generation}, updated_at={self.updated_at})>"

"""
Test configuration and shared fixtures for the retail sales explorer test suite.
Provides per-test SQLite databases, an API client and sample transactions.
"""

import os
import tempfile

# Keep the module-level engine away from the working directory
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.mkdtemp(prefix='sales-tests-'), 'app.db')}"
)

import pytest
from typing import Any, Callable, Dict, List
from datetime import datetime
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from app.app import create_app
from app.core.database import build_engine, create_all_tables, get_session_factory
from app.transactions.dao import TransactionDAO


# ===== DATABASE SETUP =====


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine; the list operation reads from two threads at once"""
    engine = build_engine(f"sqlite:///{tmp_path / 'sales.db'}")
    create_all_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> Callable[[], Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    """Create a database session"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(session_factory):
    """Create FastAPI test client bound to the per-test database"""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ===== SAMPLE DATA =====


def make_document(**overrides: Any) -> Dict[str, Any]:
    """A valid canonical document; override any field."""
    document: Dict[str, Any] = {
        "transaction_id": "TXN-0",
        "date": datetime(2023, 1, 1, 12, 0),
        "customer_id": "CUST-0",
        "customer_name": "Test Customer",
        "phone_number": "9000000000",
        "gender": "Female",
        "age": 30,
        "customer_region": "North",
        "customer_type": "New",
        "product_id": "PROD-0",
        "product_name": "Widget",
        "brand": "Acme",
        "product_category": "Electronics",
        "tags": [],
        "quantity": 1,
        "price_per_unit": 10.0,
        "discount_percentage": 0.0,
        "total_amount": 10.0,
        "final_amount": 10.0,
        "payment_method": "Cash",
        "order_status": "Completed",
        "delivery_type": "Standard",
        "store_id": "ST-1",
        "store_location": "Mumbai",
        "salesperson_id": "EMP-1",
        "employee_name": "Sam Clerk",
    }
    document.update(overrides)
    return document


def seed(session_factory: Callable[[], Session], documents: List[Dict[str, Any]]) -> int:
    with session_factory() as session:
        inserted, _ = TransactionDAO(session).insert_batch(documents)
    return inserted


SAMPLE_DOCUMENTS = [
    make_document(
        transaction_id="TXN-1", date=datetime(2023, 1, 5, 10, 0), customer_name="Alice Johnson",
        phone_number="9876543210", gender="Female", age=25, customer_region="North",
        product_category="Electronics", tags=["wireless", "premium"], quantity=2,
        total_amount=200.0, discount_percentage=10.0, final_amount=180.0, payment_method="Credit Card",
    ),
    make_document(
        transaction_id="TXN-2", date=datetime(2023, 1, 10, 23, 30), customer_name="Bob Smith",
        phone_number="9123456780", gender="Male", age=30, customer_region="South",
        product_category="Clothing", tags=["cotton"], quantity=5,
        total_amount=100.0, discount_percentage=0.0, final_amount=100.0, payment_method="Cash",
    ),
    make_document(
        transaction_id="TXN-3", date=datetime(2023, 2, 1, 0, 0), customer_name="Carol White",
        phone_number="9988776655", gender="Female", age=40, customer_region="East",
        product_category="Beauty", tags=["organic", "premium"], quantity=1,
        total_amount=50.0, discount_percentage=20.0, final_amount=40.0, payment_method="UPI",
    ),
    make_document(
        transaction_id="TXN-4", date=datetime(2023, 2, 15, 12, 0), customer_name="David Brown",
        phone_number="9000011111", gender="Male", age=45, customer_region="West",
        product_category="Electronics", tags=["gaming"], quantity=3,
        total_amount=300.0, discount_percentage=5.0, final_amount=285.0, payment_method="Debit Card",
    ),
    make_document(
        transaction_id="TXN-5", date=datetime(2023, 3, 1, 8, 0), customer_name="Eve Adams",
        phone_number="9555512345", gender="Female", age=25, customer_region="North",
        product_category="Clothing", tags=[], quantity=4,
        total_amount=80.0, discount_percentage=0.0, final_amount=80.0, payment_method="Cash",
    ),
    make_document(
        transaction_id="TXN-6", date=datetime(2023, 3, 20, 18, 0), customer_name="alice cooper",
        phone_number="9111122222", gender="Male", age=35, customer_region="Central",
        product_category="Beauty", tags=["premium"], quantity=1,
        total_amount=60.0, discount_percentage=50.0, final_amount=30.0, payment_method="Credit Card",
    ),
]


@pytest.fixture
def sample_transactions(session_factory) -> List[Dict[str, Any]]:
    """Six transactions spread over Jan-Mar 2023, five regions and three categories"""
    seed(session_factory, SAMPLE_DOCUMENTS)
    return SAMPLE_DOCUMENTS


@pytest.fixture
def document_factory() -> Callable[..., Dict[str, Any]]:
    return make_document


@pytest.fixture
def seed_transactions(session_factory) -> Callable[[List[Dict[str, Any]]], int]:
    """Insert canonical documents into the per-test database"""
    return lambda documents: seed(session_factory, documents)

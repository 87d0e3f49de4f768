# app/transactions/__init__.py

from .models import StoreGeneration, Transaction, TransactionTag
from .dao import TransactionDAO
from .service import TransactionService

__all__ = [
    # Models
    "StoreGeneration",
    "Transaction",
    "TransactionTag",
    # DAOs
    "TransactionDAO",
    # Services
    "TransactionService",
]

# app/core/base_dao.py
"""Generic base DAO for common database operations."""

import functools
import logging
from typing import Any, Generic, List, Type, TypeVar
from abc import ABC

from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from app.core.database import Base
from app.core.exceptions import StoreError

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


def store_operation(name: str):
    """Translate SQLAlchemy failures raised by a DAO method into StoreError.

    Connectivity problems and timeouts are flagged as retryable.
    """

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except (OperationalError, PoolTimeoutError) as e:
                self.db.rollback()
                logger.error("Store operation %s failed (retryable): %s", name, e)
                raise StoreError(f"Error during {name}: {e}", retryable=True, operation=name) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error("Store operation %s failed: %s", name, e)
                raise StoreError(f"Error during {name}: {e}", operation=name) from e

        return wrapper

    return decorator


class BaseDAO(Generic[ModelType], ABC):
    """Generic DAO for common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    @store_operation("distinct")
    def distinct_values(self, field_name: str) -> List[Any]:
        """Distinct non-null values of a column, in store order."""
        column = getattr(self.model, field_name)
        query = select(column).where(column.isnot(None)).distinct()
        return list(self.db.execute(query).scalars().all())

    @store_operation("delete_all")
    def delete_all(self) -> int:
        """Delete every record of the model and commit."""
        result = self.db.execute(delete(self.model))
        self.db.commit()
        return result.rowcount or 0

"""Shared FastAPI dependencies."""

from typing import Annotated, Callable
from fastapi import Depends
from sqlalchemy.orm import Session
from app.core.database import get_session_factory

# Core database dependencies
SessionFactoryDep = Annotated[Callable[[], Session], Depends(get_session_factory)]

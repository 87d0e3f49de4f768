# app/core/config.py
"""Environment-driven settings for the sales explorer."""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ===== DATABASE =====
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sales.db")
STORE_TIMEOUT_SECONDS = _float_env("STORE_TIMEOUT_SECONDS", 30.0)

# ===== APPLICATION =====
APPLICATION_ID = os.getenv("APPLICATION_ID", "retail-sales-explorer")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
FRONTEND_URL = os.getenv("FRONTEND_URL", "*")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _int_env("PORT", 5000)

# ===== PAGINATION =====
DEFAULT_PAGE_SIZE = _int_env("DEFAULT_PAGE_SIZE", 10)
MAX_PAGE_SIZE = _int_env("MAX_PAGE_SIZE", 100)

# ===== INGESTION =====
INGEST_BATCH_SIZE = _int_env("INGEST_BATCH_SIZE", 1000)
INGEST_CHUNK_SIZE = _int_env("INGEST_CHUNK_SIZE", 5000)
DATASET_PATH = os.getenv("DATASET_PATH", "./truestate_assignment_dataset.csv")

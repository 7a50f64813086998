"""
Core module containing configuration, errors and utilities.
"""

from .config import settings
from .exceptions import (
    PizzaHuntError,
    DocumentStoreError,
    OfflineQueueError,
    SyncError,
    SubmissionError
)
from .utils import generate_id, get_timestamp, safe_json_loads

__all__ = [
    "settings",
    "PizzaHuntError",
    "DocumentStoreError",
    "OfflineQueueError",
    "SyncError",
    "SubmissionError",
    "generate_id",
    "get_timestamp",
    "safe_json_loads",
]

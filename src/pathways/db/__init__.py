"""Database module for the SQLite learner store.

Provides:
- Store handle management (open_store) and schema initialization
- Read-only repository functions for users, roadmaps, checkpoints,
  quizzes and quiz attempts
"""

from pathways.db.database import StoreError, init_store, open_store
from pathways.db.records_repository import UserNotFoundError

__all__ = ["StoreError", "UserNotFoundError", "init_store", "open_store"]

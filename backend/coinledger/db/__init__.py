"""Database helpers: declarative base, column types and session management."""

from .base import Base
from .session import Database, get_database, unit_of_work
from .types import LedgerDecimal, UTCDateTime

__all__ = ["Base", "Database", "get_database", "unit_of_work", "LedgerDecimal", "UTCDateTime"]

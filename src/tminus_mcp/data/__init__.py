"""Data access layer."""

from __future__ import annotations

from .database import Database, DatabaseNotConnectedError, PreparedStatement, RunResult, SqliteDatabase
from .repositories import AccountRepository, EventRepository, PolicyRepository
from .supabase import SupabaseGateway, SupabaseNotInitializedError

__all__ = [
    "AccountRepository",
    "Database",
    "DatabaseNotConnectedError",
    "EventRepository",
    "PolicyRepository",
    "PreparedStatement",
    "RunResult",
    "SqliteDatabase",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
]

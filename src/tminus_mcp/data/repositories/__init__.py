"""Repositories own all SQL; handlers work with domain records only."""

from __future__ import annotations

from .accounts import AccountRepository
from .events import EventRepository
from .policies import PolicyRepository

__all__ = ["AccountRepository", "EventRepository", "PolicyRepository"]

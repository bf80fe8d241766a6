"""Domain types shared by the pure core and the tool handlers."""

from __future__ import annotations

from .enums import (
    BlockPolicy,
    BufferScope,
    BufferType,
    CalendarKind,
    ChannelStatus,
    ConstraintKind,
    DetailLevel,
    EventStatus,
    Granularity,
    InteractionOutcome,
    ProofFormat,
    RelationshipCategory,
    SlotStatus,
    SyncHealth,
    Tier,
)
from .models import AccountRecord, McpEvent, PolicyEdge, UserContext

__all__ = [
    "AccountRecord",
    "BlockPolicy",
    "BufferScope",
    "BufferType",
    "CalendarKind",
    "ChannelStatus",
    "ConstraintKind",
    "DetailLevel",
    "EventStatus",
    "Granularity",
    "InteractionOutcome",
    "McpEvent",
    "PolicyEdge",
    "ProofFormat",
    "RelationshipCategory",
    "SlotStatus",
    "SyncHealth",
    "Tier",
    "UserContext",
]

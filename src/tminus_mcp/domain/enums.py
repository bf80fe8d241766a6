from __future__ import annotations

from enum import Enum


class _ValuesMixin:
    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)  # type: ignore[attr-defined]


class Tier(_ValuesMixin, str, Enum):
    """Subscription tiers, totally ordered by ``level``.

    ``UNKNOWN`` absorbs any unrecognized tier string and sits below ``FREE``.
    """

    UNKNOWN = "unknown"
    FREE = "free"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    @property
    def level(self) -> int:
        return _TIER_LEVELS[self]

    @classmethod
    def parse(cls, raw: object) -> "Tier":
        if isinstance(raw, Tier):
            return raw
        if isinstance(raw, str) and raw != cls.UNKNOWN.value:
            try:
                return cls(raw)
            except ValueError:
                pass
        return cls.UNKNOWN

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls if member is not cls.UNKNOWN)


_TIER_LEVELS = {
    Tier.UNKNOWN: 0,
    Tier.FREE: 1,
    Tier.PREMIUM: 2,
    Tier.ENTERPRISE: 3,
}


class SyncHealth(_ValuesMixin, str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    STALE = "stale"
    UNHEALTHY = "unhealthy"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _HEALTH_SEVERITY[self]


_HEALTH_SEVERITY = {
    SyncHealth.HEALTHY: 0,
    SyncHealth.DEGRADED: 1,
    SyncHealth.STALE: 2,
    SyncHealth.UNHEALTHY: 3,
    SyncHealth.ERROR: 4,
}


class ChannelStatus(_ValuesMixin, str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    NONE = "none"


class EventStatus(_ValuesMixin, str, Enum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class SlotStatus(_ValuesMixin, str, Enum):
    FREE = "free"
    TENTATIVE = "tentative"
    BUSY = "busy"


class Granularity(_ValuesMixin, str, Enum):
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"

    @property
    def milliseconds(self) -> int:
        return _GRANULARITY_MS[self]


_GRANULARITY_MS = {
    Granularity.FIFTEEN_MINUTES: 15 * 60 * 1000,
    Granularity.THIRTY_MINUTES: 30 * 60 * 1000,
    Granularity.ONE_HOUR: 60 * 60 * 1000,
}


class DetailLevel(_ValuesMixin, str, Enum):
    BUSY = "BUSY"
    TITLE = "TITLE"
    FULL = "FULL"


class CalendarKind(_ValuesMixin, str, Enum):
    BUSY_OVERLAY = "BUSY_OVERLAY"
    TRUE_MIRROR = "TRUE_MIRROR"


class BlockPolicy(_ValuesMixin, str, Enum):
    BUSY = "BUSY"
    TITLE = "TITLE"


class ProofFormat(_ValuesMixin, str, Enum):
    PDF = "pdf"
    CSV = "csv"


class ConstraintKind(_ValuesMixin, str, Enum):
    TRIP = "trip"
    WORKING_HOURS = "working_hours"
    BUFFER = "buffer"
    NO_MEETINGS_AFTER = "no_meetings_after"
    OVERRIDE = "override"


class BufferType(_ValuesMixin, str, Enum):
    TRAVEL = "travel"
    PREP = "prep"
    COOLDOWN = "cooldown"


class BufferScope(_ValuesMixin, str, Enum):
    ALL = "all"
    EXTERNAL = "external"


class RelationshipCategory(_ValuesMixin, str, Enum):
    FAMILY = "FAMILY"
    INVESTOR = "INVESTOR"
    FRIEND = "FRIEND"
    CLIENT = "CLIENT"
    BOARD = "BOARD"
    COLLEAGUE = "COLLEAGUE"
    OTHER = "OTHER"


class InteractionOutcome(_ValuesMixin, str, Enum):
    ATTENDED = "ATTENDED"
    CANCELED_BY_ME = "CANCELED_BY_ME"
    CANCELED_BY_THEM = "CANCELED_BY_THEM"
    NO_SHOW_THEM = "NO_SHOW_THEM"
    NO_SHOW_ME = "NO_SHOW_ME"
    MOVED_LAST_MINUTE_THEM = "MOVED_LAST_MINUTE_THEM"
    MOVED_LAST_MINUTE_ME = "MOVED_LAST_MINUTE_ME"

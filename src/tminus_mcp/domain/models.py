from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .enums import CalendarKind, DetailLevel, EventStatus, Tier


@dataclass(frozen=True, slots=True)
class UserContext:
    """Authenticated caller, produced once per request by the authenticator."""

    user_id: str
    email: str
    tier: str = Tier.FREE.value


@dataclass(slots=True)
class AccountRecord:
    account_id: str
    user_id: str
    provider: str
    email: str
    status: str
    channel_id: Optional[str] = None
    channel_expiry_ts: Optional[str] = None
    last_sync_ts: Optional[str] = None
    error_count: int = 0

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AccountRecord":
        return cls(
            account_id=str(record["account_id"]),
            user_id=str(record.get("user_id") or ""),
            provider=str(record.get("provider") or "google"),
            email=str(record.get("email") or ""),
            status=str(record.get("status") or "active"),
            channel_id=record.get("channel_id"),
            channel_expiry_ts=record.get("channel_expiry_ts"),
            last_sync_ts=record.get("last_sync_ts"),
            error_count=int(record.get("error_count") or 0),
        )


@dataclass(slots=True)
class McpEvent:
    event_id: str
    user_id: str
    title: str
    start_ts: str
    end_ts: str
    timezone: str = "UTC"
    account_id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: EventStatus = EventStatus.CONFIRMED
    source: str = "mcp"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "McpEvent":
        return cls(
            event_id=str(record["event_id"]),
            user_id=str(record["user_id"]),
            title=str(record["title"]),
            start_ts=str(record["start_ts"]),
            end_ts=str(record["end_ts"]),
            timezone=record.get("timezone") or "UTC",
            account_id=record.get("account_id"),
            description=record.get("description"),
            location=record.get("location"),
            status=EventStatus(record.get("status") or EventStatus.CONFIRMED),
            source=record.get("source") or "mcp",
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "user_id": self.user_id,
            "account_id": self.account_id,
            "title": self.title,
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
            "timezone": self.timezone,
            "description": self.description,
            "location": self.location,
            "status": self.status.value,
            "source": self.source,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(slots=True)
class PolicyEdge:
    policy_id: str
    user_id: str
    from_account: str
    to_account: str
    detail_level: DetailLevel
    calendar_kind: CalendarKind = CalendarKind.BUSY_OVERLAY
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PolicyEdge":
        return cls(
            policy_id=str(record["policy_id"]),
            user_id=str(record["user_id"]),
            from_account=str(record["from_account"]),
            to_account=str(record["to_account"]),
            detail_level=DetailLevel(record["detail_level"]),
            calendar_kind=CalendarKind(record.get("calendar_kind") or CalendarKind.BUSY_OVERLAY),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

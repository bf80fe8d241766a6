from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...domain import McpEvent
from ..database import Database

_COLUMNS = (
    "event_id, user_id, account_id, title, start_ts, end_ts, timezone, "
    "description, location, status, source, created_at, updated_at"
)


@dataclass(slots=True)
class EventRepository:
    """Events created through MCP. Timestamps are stored exactly as supplied."""

    database: Database
    table_name: str = "mcp_events"

    async def list_for_user(self, user_id: str, account_id: Optional[str] = None) -> List[McpEvent]:
        if account_id is None:
            statement = self.database.prepare(
                f"SELECT {_COLUMNS} FROM {self.table_name} WHERE user_id = ?1"
            ).bind(user_id)
        else:
            statement = self.database.prepare(
                f"SELECT {_COLUMNS} FROM {self.table_name} WHERE user_id = ?1 AND account_id = ?2"
            ).bind(user_id, account_id)
        rows = await statement.all()
        return [McpEvent.from_record(row) for row in rows]

    async def get(self, user_id: str, event_id: str) -> Optional[McpEvent]:
        row = await (
            self.database.prepare(f"SELECT {_COLUMNS} FROM {self.table_name} WHERE event_id = ?1 AND user_id = ?2")
            .bind(event_id, user_id)
            .first()
        )
        return McpEvent.from_record(row) if row else None

    async def insert(self, event: McpEvent) -> McpEvent:
        record = event.to_record()
        await (
            self.database.prepare(
                f"INSERT INTO {self.table_name} ({_COLUMNS}) "
                "VALUES (?1, ?2, ?3, ?4, ?5, ?6, ?7, ?8, ?9, ?10, ?11, ?12, ?13)"
            )
            .bind(*(record[name] for name in _COLUMNS.split(", ")))
            .run()
        )
        return event

    async def update(self, event: McpEvent) -> bool:
        result = await (
            self.database.prepare(
                f"UPDATE {self.table_name} SET title = ?1, start_ts = ?2, end_ts = ?3, timezone = ?4, "
                "description = ?5, location = ?6, status = ?7, updated_at = ?8 "
                "WHERE event_id = ?9 AND user_id = ?10"
            )
            .bind(
                event.title,
                event.start_ts,
                event.end_ts,
                event.timezone,
                event.description,
                event.location,
                event.status.value,
                event.updated_at,
                event.event_id,
                event.user_id,
            )
            .run()
        )
        return result.changes > 0

    async def delete(self, user_id: str, event_id: str) -> bool:
        result = await (
            self.database.prepare(f"DELETE FROM {self.table_name} WHERE event_id = ?1 AND user_id = ?2")
            .bind(event_id, user_id)
            .run()
        )
        return result.changes > 0

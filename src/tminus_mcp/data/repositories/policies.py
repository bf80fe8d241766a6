from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...domain import PolicyEdge
from ..database import Database

_COLUMNS = "policy_id, user_id, from_account, to_account, detail_level, calendar_kind, created_at, updated_at"


@dataclass(slots=True)
class PolicyRepository:
    database: Database
    table_name: str = "mcp_policies"

    async def list_for_user(self, user_id: str) -> List[PolicyEdge]:
        rows = await (
            self.database.prepare(
                f"SELECT {_COLUMNS} FROM {self.table_name} WHERE user_id = ?1 ORDER BY from_account, to_account"
            )
            .bind(user_id)
            .all()
        )
        return [PolicyEdge.from_record(row) for row in rows]

    async def get(self, user_id: str, from_account: str, to_account: str) -> Optional[PolicyEdge]:
        row = await (
            self.database.prepare(
                f"SELECT {_COLUMNS} FROM {self.table_name} "
                "WHERE user_id = ?1 AND from_account = ?2 AND to_account = ?3"
            )
            .bind(user_id, from_account, to_account)
            .first()
        )
        return PolicyEdge.from_record(row) if row else None

    async def upsert(self, policy: PolicyEdge) -> PolicyEdge:
        """Insert or update the edge keyed by (user, from, to).

        An existing edge keeps its ``policy_id`` and ``created_at``.
        """

        await (
            self.database.prepare(
                f"INSERT INTO {self.table_name} ({_COLUMNS}) VALUES (?1, ?2, ?3, ?4, ?5, ?6, ?7, ?8) "
                "ON CONFLICT(user_id, from_account, to_account) DO UPDATE SET "
                "detail_level = excluded.detail_level, "
                "calendar_kind = excluded.calendar_kind, "
                "updated_at = excluded.updated_at"
            )
            .bind(
                policy.policy_id,
                policy.user_id,
                policy.from_account,
                policy.to_account,
                policy.detail_level.value,
                policy.calendar_kind.value,
                policy.created_at,
                policy.updated_at,
            )
            .run()
        )
        stored = await self.get(policy.user_id, policy.from_account, policy.to_account)
        return stored or policy

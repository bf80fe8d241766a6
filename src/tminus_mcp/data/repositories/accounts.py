from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...domain import AccountRecord
from ..database import Database

_COLUMNS = "account_id, user_id, provider, email, status, channel_id, channel_expiry_ts, last_sync_ts, error_count"


@dataclass(slots=True)
class AccountRepository:
    database: Database
    table_name: str = "accounts"

    async def list_for_user(self, user_id: str) -> List[AccountRecord]:
        rows = await (
            self.database.prepare(
                f"SELECT {_COLUMNS} FROM {self.table_name} WHERE user_id = ?1 ORDER BY created_at, rowid"
            )
            .bind(user_id)
            .all()
        )
        return [AccountRecord.from_record(row) for row in rows]

    async def get(self, user_id: str, account_id: str) -> Optional[AccountRecord]:
        row = await (
            self.database.prepare(f"SELECT {_COLUMNS} FROM {self.table_name} WHERE account_id = ?1 AND user_id = ?2")
            .bind(account_id, user_id)
            .first()
        )
        return AccountRecord.from_record(row) if row else None

    async def add(self, account: AccountRecord) -> AccountRecord:
        await (
            self.database.prepare(
                f"INSERT INTO {self.table_name} ({_COLUMNS}) VALUES (?1, ?2, ?3, ?4, ?5, ?6, ?7, ?8, ?9)"
            )
            .bind(
                account.account_id,
                account.user_id,
                account.provider,
                account.email,
                account.status,
                account.channel_id,
                account.channel_expiry_ts,
                account.last_sync_ts,
                account.error_count,
            )
            .run()
        )
        return account

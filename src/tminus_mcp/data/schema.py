from __future__ import annotations

PRAGMA_SQL = """
PRAGMA foreign_keys = ON;
PRAGMA journal_mode = WAL;
"""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
  account_id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  provider TEXT NOT NULL DEFAULT 'google',
  provider_subject TEXT,
  email TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'active',
  channel_id TEXT,
  channel_token TEXT,
  channel_expiry_ts TEXT,
  last_sync_ts TEXT,
  error_count INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_accounts_user ON accounts(user_id);
CREATE INDEX IF NOT EXISTS idx_accounts_channel ON accounts(channel_id);

CREATE TABLE IF NOT EXISTS mcp_events (
  event_id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  account_id TEXT REFERENCES accounts(account_id) ON DELETE SET NULL,
  title TEXT NOT NULL,
  start_ts TEXT NOT NULL,
  end_ts TEXT NOT NULL,
  timezone TEXT DEFAULT 'UTC',
  description TEXT,
  location TEXT,
  status TEXT NOT NULL DEFAULT 'confirmed',
  source TEXT NOT NULL DEFAULT 'mcp',
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_mcp_events_user ON mcp_events(user_id);
CREATE INDEX IF NOT EXISTS idx_mcp_events_user_time ON mcp_events(user_id, start_ts, end_ts);

CREATE TABLE IF NOT EXISTS mcp_policies (
  policy_id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  from_account TEXT NOT NULL REFERENCES accounts(account_id) ON DELETE CASCADE,
  to_account TEXT NOT NULL REFERENCES accounts(account_id) ON DELETE CASCADE,
  detail_level TEXT NOT NULL CHECK(detail_level IN ('BUSY', 'TITLE', 'FULL')),
  calendar_kind TEXT NOT NULL DEFAULT 'BUSY_OVERLAY' CHECK(calendar_kind IN ('BUSY_OVERLAY', 'TRUE_MIRROR')),
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
  UNIQUE(user_id, from_account, to_account)
);

CREATE INDEX IF NOT EXISTS idx_mcp_policies_user ON mcp_policies(user_id);
CREATE INDEX IF NOT EXISTS idx_mcp_policies_from ON mcp_policies(from_account);
CREATE INDEX IF NOT EXISTS idx_mcp_policies_to ON mcp_policies(to_account);
"""

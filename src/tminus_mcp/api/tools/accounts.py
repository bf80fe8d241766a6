from __future__ import annotations

from typing import Any, Dict

from ...core.health import compute_overall_health
from ...domain import SyncHealth
from ..errors import NotFoundError
from ..models import AccountHealthPayload, SyncStatusPayload
from ..registry import ToolContext, ToolSet, object_schema
from ..serializers import serialize_account
from ..validators import (
    GetSyncStatusParams,
    NoParams,
    validate_get_sync_status_params,
    validate_no_params,
)

TOOLS = ToolSet("accounts")


@TOOLS.register(
    "calendar.list_accounts",
    description="List the calendar accounts linked to the caller, with webhook channel status.",
    validator=validate_no_params,
)
async def list_accounts(ctx: ToolContext, params: NoParams) -> Dict[str, Any]:
    accounts = await ctx.accounts.list_for_user(ctx.user.user_id)
    return {"accounts": [serialize_account(account, ctx.now_ms) for account in accounts]}


@TOOLS.register(
    "calendar.get_sync_status",
    description=(
        "Report sync health per linked account and overall. Health is derived from the time since the "
        "last successful sync: healthy, degraded, stale, unhealthy or error."
    ),
    validator=validate_get_sync_status_params,
    input_schema=object_schema(
        {"account_id": {"type": "string", "description": "Restrict the report to one account."}},
    ),
)
async def get_sync_status(ctx: ToolContext, params: GetSyncStatusParams) -> Dict[str, Any]:
    if params.account_id is not None:
        account = await ctx.accounts.get(ctx.user.user_id, params.account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {params.account_id}")
        accounts = [account]
    else:
        accounts = await ctx.accounts.list_for_user(ctx.user.user_id)

    rows = [AccountHealthPayload.from_domain(account, ctx.now_ms) for account in accounts]
    overall = compute_overall_health(SyncHealth(row.health) for row in rows)
    return SyncStatusPayload(overall=overall.value, accounts=rows).model_dump()

from __future__ import annotations

from typing import Any, Dict

from ...core.ids import POLICY_PREFIX, generate_id
from ...core.timeutil import to_iso_ms
from ...domain import CalendarKind, DetailLevel, PolicyEdge
from ..errors import NotFoundError
from ..registry import ToolContext, ToolSet, object_schema
from ..serializers import serialize_policy
from ..validators import (
    NoParams,
    PolicyEdgeKey,
    SetPolicyEdgeParams,
    validate_get_policy_edge_params,
    validate_no_params,
    validate_set_policy_edge_params,
)

TOOLS = ToolSet("policies")

_EDGE_FIELDS = {
    "from_account": {"type": "string", "description": "Account whose events are shared."},
    "to_account": {"type": "string", "description": "Account that receives the projection."},
}


@TOOLS.register(
    "calendar.list_policies",
    description="List the sharing policy edges between the caller's accounts.",
    validator=validate_no_params,
)
async def list_policies(ctx: ToolContext, params: NoParams) -> Dict[str, Any]:
    policies = await ctx.policies.list_for_user(ctx.user.user_id)
    return {"policies": [serialize_policy(policy) for policy in policies]}


@TOOLS.register(
    "calendar.get_policy_edge",
    description="Fetch the sharing policy from one account to another.",
    validator=validate_get_policy_edge_params,
    input_schema=object_schema(_EDGE_FIELDS, required=("from_account", "to_account")),
)
async def get_policy_edge(ctx: ToolContext, params: PolicyEdgeKey) -> Dict[str, Any]:
    policy = await ctx.policies.get(ctx.user.user_id, params.from_account, params.to_account)
    if policy is None:
        raise NotFoundError(f"Policy edge not found: {params.from_account} -> {params.to_account}")
    return serialize_policy(policy)


@TOOLS.register(
    "calendar.set_policy_edge",
    description=(
        "Create or update how much detail one account's events reveal on another account: "
        "BUSY, TITLE or FULL, as a busy overlay or a true mirror."
    ),
    validator=validate_set_policy_edge_params,
    input_schema=object_schema(
        {
            **_EDGE_FIELDS,
            "detail_level": {"type": "string", "enum": list(DetailLevel.values())},
            "calendar_kind": {
                "type": "string",
                "enum": list(CalendarKind.values()),
                "default": CalendarKind.BUSY_OVERLAY.value,
            },
        },
        required=("from_account", "to_account", "detail_level"),
    ),
)
async def set_policy_edge(ctx: ToolContext, params: SetPolicyEdgeParams) -> Dict[str, Any]:
    for account_id in (params.from_account, params.to_account):
        if await ctx.accounts.get(ctx.user.user_id, account_id) is None:
            raise NotFoundError(f"Account not found: {account_id}")

    now = to_iso_ms(ctx.now_ms)
    policy = await ctx.policies.upsert(
        PolicyEdge(
            policy_id=generate_id(POLICY_PREFIX),
            user_id=ctx.user.user_id,
            from_account=params.from_account,
            to_account=params.to_account,
            detail_level=params.detail_level,
            calendar_kind=params.calendar_kind,
            created_at=now,
            updated_at=now,
        )
    )
    return serialize_policy(policy)

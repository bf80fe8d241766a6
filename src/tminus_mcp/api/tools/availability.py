from __future__ import annotations

from typing import Any, Dict, List

from ...core.availability import (
    CalendarEventForAvailability,
    compute_availability_slots,
    generate_time_slots,
)
from ...core.timeutil import to_iso_ms
from ...domain import Granularity, McpEvent
from ..registry import ToolContext, ToolSet, object_schema
from ..validators import GetAvailabilityParams, validate_get_availability_params

TOOLS = ToolSet("availability")


async def _events_for(ctx: ToolContext, params: GetAvailabilityParams) -> List[McpEvent]:
    if params.accounts is None:
        return await ctx.events.list_for_user(ctx.user.user_id)
    events: List[McpEvent] = []
    for account_id in dict.fromkeys(params.accounts):
        events.extend(await ctx.events.list_for_user(ctx.user.user_id, account_id))
    return events


@TOOLS.register(
    "calendar.get_availability",
    description=(
        "Compute merged free/busy availability across the caller's accounts. The range is split into "
        "slots of the requested granularity and each slot is reported as free, tentative or busy."
    ),
    validator=validate_get_availability_params,
    input_schema=object_schema(
        {
            "start": {"type": "string", "format": "date-time", "description": "Range start (ISO 8601)."},
            "end": {"type": "string", "format": "date-time", "description": "Range end, at most 7 days later."},
            "granularity": {"type": "string", "enum": list(Granularity.values()), "default": "30m"},
            "accounts": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Restrict to these account ids; omit or pass [] for all accounts.",
            },
        },
        required=("start", "end"),
    ),
)
async def get_availability(ctx: ToolContext, params: GetAvailabilityParams) -> Dict[str, Any]:
    events = await _events_for(ctx, params)
    slots = generate_time_slots(params.start_ms, params.end_ms, params.granularity.milliseconds)
    availability = compute_availability_slots(
        slots,
        (
            CalendarEventForAvailability(
                start_ts=event.start_ts,
                end_ts=event.end_ts,
                status=event.status,
                account_id=event.account_id,
            )
            for event in events
        ),
    )
    result: Dict[str, Any] = {
        "start": to_iso_ms(params.start_ms),
        "end": to_iso_ms(params.end_ms),
        "granularity": params.granularity.value,
    }
    if params.accounts is not None:
        result["accounts"] = list(params.accounts)
    result["slots"] = [slot.to_dict() for slot in availability]
    return result

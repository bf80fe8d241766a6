from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from ...core.ids import EVENT_PREFIX, generate_id
from ...core.timeutil import parse_iso_ms, to_iso_ms
from ...domain import EventStatus, McpEvent
from ..errors import InvalidParamsError, NotFoundError
from ..registry import ToolContext, ToolSet, object_schema
from ..serializers import serialize_event
from ..validators import (
    CreateEventParams,
    DeleteEventParams,
    ListEventsParams,
    UpdateEventParams,
    validate_create_event_params,
    validate_delete_event_params,
    validate_list_events_params,
    validate_update_event_params,
)

TOOLS = ToolSet("events")

_EVENT_FIELDS = {
    "title": {"type": "string", "description": "Event title."},
    "start_ts": {"type": "string", "format": "date-time", "description": "Start time (ISO 8601)."},
    "end_ts": {"type": "string", "format": "date-time", "description": "End time (ISO 8601)."},
    "timezone": {"type": "string", "description": "IANA timezone, defaults to UTC."},
    "description": {"type": "string"},
    "location": {"type": "string"},
    "status": {"type": "string", "enum": [EventStatus.CONFIRMED.value, EventStatus.TENTATIVE.value]},
}

_PATCH_FIELDS = {**_EVENT_FIELDS, "status": {"type": "string", "enum": [status.value for status in EventStatus]}}


async def _require_owned_account(ctx: ToolContext, account_id: Optional[str]) -> None:
    if account_id is None:
        return
    if await ctx.accounts.get(ctx.user.user_id, account_id) is None:
        raise NotFoundError(f"Account not found: {account_id}")


@TOOLS.register(
    "calendar.list_events",
    description="List the caller's events overlapping a time range, sorted by start time.",
    validator=validate_list_events_params,
    input_schema=object_schema(
        {
            "start": {"type": "string", "format": "date-time", "description": "Range start (ISO 8601)."},
            "end": {"type": "string", "format": "date-time", "description": "Range end (ISO 8601)."},
            "account_id": {"type": "string", "description": "Only events attached to this account."},
            "limit": {"type": "integer", "minimum": 1, "maximum": 500, "default": 100},
        },
        required=("start", "end"),
    ),
)
async def list_events(ctx: ToolContext, params: ListEventsParams) -> Dict[str, Any]:
    events = await ctx.events.list_for_user(ctx.user.user_id, params.account_id)
    in_range = []
    for event in events:
        start_ms = parse_iso_ms(event.start_ts)
        end_ms = parse_iso_ms(event.end_ts)
        if start_ms is None or end_ms is None:
            continue
        if start_ms < params.end_ms and end_ms > params.start_ms:
            in_range.append((start_ms, event))
    in_range.sort(key=lambda item: (item[0], item[1].event_id))
    selected = [serialize_event(event) for _, event in in_range[: params.limit]]
    return {"events": selected, "count": len(selected)}


@TOOLS.register(
    "calendar.create_event",
    description="Create an event on the caller's calendar.",
    validator=validate_create_event_params,
    input_schema=object_schema(
        {**_EVENT_FIELDS, "account_id": {"type": "string", "description": "Account that owns the event."}},
        required=("title", "start_ts", "end_ts"),
    ),
)
async def create_event(ctx: ToolContext, params: CreateEventParams) -> Dict[str, Any]:
    await _require_owned_account(ctx, params.account_id)
    now = to_iso_ms(ctx.now_ms)
    event = McpEvent(
        event_id=generate_id(EVENT_PREFIX),
        user_id=ctx.user.user_id,
        title=params.title,
        start_ts=params.start_ts,
        end_ts=params.end_ts,
        timezone=params.timezone,
        account_id=params.account_id,
        description=params.description,
        location=params.location,
        status=params.status,
        created_at=now,
        updated_at=now,
    )
    await ctx.events.insert(event)
    return serialize_event(event)


@TOOLS.register(
    "calendar.update_event",
    description="Apply a partial update to one of the caller's events.",
    validator=validate_update_event_params,
    input_schema=object_schema(
        {
            "event_id": {"type": "string"},
            "patch": {"type": "object", "properties": _PATCH_FIELDS, "minProperties": 1},
        },
        required=("event_id", "patch"),
    ),
)
async def update_event(ctx: ToolContext, params: UpdateEventParams) -> Dict[str, Any]:
    existing = await ctx.events.get(ctx.user.user_id, params.event_id)
    if existing is None:
        raise NotFoundError(f"Event not found: {params.event_id}")

    updated = replace(existing, **params.patch.changes(), updated_at=to_iso_ms(ctx.now_ms))
    start_ms = parse_iso_ms(updated.start_ts)
    end_ms = parse_iso_ms(updated.end_ts)
    if start_ms is not None and end_ms is not None and start_ms >= end_ms:
        raise InvalidParamsError("'start_ts' must be before 'end_ts'")

    if not await ctx.events.update(updated):
        raise NotFoundError(f"Event not found: {params.event_id}")
    return serialize_event(updated)


@TOOLS.register(
    "calendar.delete_event",
    description="Delete one of the caller's events.",
    validator=validate_delete_event_params,
    input_schema=object_schema({"event_id": {"type": "string"}}, required=("event_id",)),
)
async def delete_event(ctx: ToolContext, params: DeleteEventParams) -> Dict[str, Any]:
    if not await ctx.events.delete(ctx.user.user_id, params.event_id):
        raise NotFoundError(f"Event not found: {params.event_id}")
    return {"deleted": True, "event_id": params.event_id}

from __future__ import annotations

from typing import Any, Dict

from ...domain import InteractionOutcome, RelationshipCategory
from ..registry import ToolContext, ToolSet, object_schema
from ..validators import (
    AddRelationshipParams,
    MarkOutcomeParams,
    NoParams,
    ReconnectionSuggestionsParams,
    validate_add_relationship_params,
    validate_mark_outcome_params,
    validate_no_params,
    validate_reconnection_suggestions_params,
)

TOOLS = ToolSet("relationships")


def _with_user(ctx: ToolContext, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"user_id": ctx.user.user_id, **payload}


@TOOLS.register(
    "calendar.add_relationship",
    description="Start tracking a relationship so drift and reconnection suggestions can be computed.",
    validator=validate_add_relationship_params,
    input_schema=object_schema(
        {
            "participant_email": {"type": "string", "format": "email"},
            "category": {"type": "string", "enum": list(RelationshipCategory.values())},
            "display_name": {"type": "string"},
            "closeness_weight": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.5},
            "city": {"type": "string"},
            "timezone": {"type": "string"},
            "interaction_frequency_target": {"type": "integer", "minimum": 1, "description": "Days."},
        },
        required=("participant_email", "category"),
    ),
)
async def add_relationship(ctx: ToolContext, params: AddRelationshipParams) -> Any:
    return await ctx.bindings.usergraph.call("relationships.add", _with_user(ctx, params.to_payload()))


@TOOLS.register(
    "calendar.get_drift_report",
    description="List relationships that are overdue for contact relative to their frequency target.",
    validator=validate_no_params,
)
async def get_drift_report(ctx: ToolContext, params: NoParams) -> Any:
    return await ctx.bindings.usergraph.call("relationships.drift_report", _with_user(ctx, {}))


@TOOLS.register(
    "calendar.mark_outcome",
    description="Record how an interaction with a tracked relationship turned out.",
    validator=validate_mark_outcome_params,
    input_schema=object_schema(
        {
            "relationship_id": {"type": "string"},
            "outcome": {"type": "string", "enum": list(InteractionOutcome.values())},
            "canonical_event_id": {"type": "string"},
            "note": {"type": "string"},
        },
        required=("relationship_id", "outcome"),
    ),
)
async def mark_outcome(ctx: ToolContext, params: MarkOutcomeParams) -> Any:
    payload: Dict[str, Any] = {
        "relationship_id": params.relationship_id,
        "outcome": params.outcome.value,
        "canonical_event_id": params.canonical_event_id,
        "note": params.note,
    }
    return await ctx.bindings.usergraph.call("relationships.mark_outcome", _with_user(ctx, payload))


@TOOLS.register(
    "calendar.get_reconnection_suggestions",
    description="Suggest people worth reconnecting with, optionally near a city or during a trip.",
    validator=validate_reconnection_suggestions_params,
    input_schema=object_schema({"city": {"type": "string"}, "trip_id": {"type": "string"}}),
)
async def get_reconnection_suggestions(ctx: ToolContext, params: ReconnectionSuggestionsParams) -> Any:
    payload: Dict[str, Any] = {}
    if params.city is not None:
        payload["city"] = params.city
    if params.trip_id is not None:
        payload["trip_id"] = params.trip_id
    return await ctx.bindings.usergraph.call("relationships.reconnection_suggestions", _with_user(ctx, payload))

"""Trips, constraints, proposals and commitments.

These tools validate locally and then delegate to the user-graph and
commitments services, which own the scheduling state.
"""

from __future__ import annotations

from typing import Any, Dict

from ...domain import BlockPolicy, ConstraintKind, ProofFormat
from ..registry import ToolContext, ToolSet, object_schema
from ..validators import (
    CONSTRAINT_KINDS,
    AddConstraintParams,
    AddTripParams,
    CommitCandidateParams,
    ExportCommitmentProofParams,
    GetCommitmentStatusParams,
    ListConstraintsParams,
    ProposeTimesParams,
    validate_add_constraint_params,
    validate_add_trip_params,
    validate_commit_candidate_params,
    validate_export_commitment_proof_params,
    validate_get_commitment_status_params,
    validate_list_constraints_params,
    validate_propose_times_params,
)

TOOLS = ToolSet("scheduling")


def _with_user(ctx: ToolContext, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"user_id": ctx.user.user_id, **payload}


@TOOLS.register(
    "calendar.add_trip",
    description="Block out a trip so scheduling treats the traveller as busy for its duration.",
    validator=validate_add_trip_params,
    input_schema=object_schema(
        {
            "name": {"type": "string"},
            "start": {"type": "string", "format": "date-time"},
            "end": {"type": "string", "format": "date-time"},
            "timezone": {"type": "string", "default": "UTC"},
            "block_policy": {"type": "string", "enum": list(BlockPolicy.values()), "default": "BUSY"},
        },
        required=("name", "start", "end"),
    ),
)
async def add_trip(ctx: ToolContext, params: AddTripParams) -> Any:
    return await ctx.bindings.usergraph.call("constraints.add", _with_user(ctx, params.to_payload()))


@TOOLS.register(
    "calendar.add_constraint",
    description=(
        "Add a scheduling constraint: working_hours, buffer, no_meetings_after or override. "
        "The shape of 'config' depends on the kind."
    ),
    validator=validate_add_constraint_params,
    input_schema=object_schema(
        {
            "kind": {
                "type": "string",
                "enum": [kind.value for kind in CONSTRAINT_KINDS],
            },
            "config": {"type": "object"},
            "active_from": {"type": "string", "format": "date-time"},
            "active_to": {"type": "string", "format": "date-time"},
        },
        required=("kind", "config"),
    ),
)
async def add_constraint(ctx: ToolContext, params: AddConstraintParams) -> Any:
    return await ctx.bindings.usergraph.call("constraints.add", _with_user(ctx, params.to_payload()))


@TOOLS.register(
    "calendar.list_constraints",
    description="List the caller's scheduling constraints, optionally filtered by kind.",
    validator=validate_list_constraints_params,
    input_schema=object_schema({"kind": {"type": "string", "enum": list(ConstraintKind.values())}}),
)
async def list_constraints(ctx: ToolContext, params: ListConstraintsParams) -> Any:
    payload: Dict[str, Any] = {}
    if params.kind is not None:
        payload["kind"] = params.kind.value
    return await ctx.bindings.usergraph.call("constraints.list", _with_user(ctx, payload))


@TOOLS.register(
    "calendar.propose_times",
    description="Propose candidate meeting times that fit every required account within a window.",
    validator=validate_propose_times_params,
    input_schema=object_schema(
        {
            "title": {"type": "string"},
            "duration_minutes": {"type": "integer", "minimum": 15, "maximum": 480},
            "window_start": {"type": "string", "format": "date-time"},
            "window_end": {"type": "string", "format": "date-time"},
            "required_account_ids": {"type": "array", "items": {"type": "string"}, "minItems": 1},
            "max_candidates": {"type": "integer", "minimum": 1, "maximum": 20, "default": 5},
        },
        required=("title", "duration_minutes", "window_start", "window_end", "required_account_ids"),
    ),
)
async def propose_times(ctx: ToolContext, params: ProposeTimesParams) -> Any:
    return await ctx.bindings.usergraph.call("scheduling.propose", _with_user(ctx, params.to_payload()))


@TOOLS.register(
    "calendar.commit_candidate",
    description="Commit one proposed candidate from a scheduling session, creating the event.",
    validator=validate_commit_candidate_params,
    input_schema=object_schema(
        {"session_id": {"type": "string"}, "candidate_id": {"type": "string"}},
        required=("session_id", "candidate_id"),
    ),
)
async def commit_candidate(ctx: ToolContext, params: CommitCandidateParams) -> Any:
    return await ctx.bindings.usergraph.call(
        "scheduling.commit",
        _with_user(ctx, {"session_id": params.session_id, "candidate_id": params.candidate_id}),
    )


@TOOLS.register(
    "calendar.get_commitment_status",
    description="Report time actually spent against each client commitment.",
    validator=validate_get_commitment_status_params,
    input_schema=object_schema({"client_id": {"type": "string"}}),
)
async def get_commitment_status(ctx: ToolContext, params: GetCommitmentStatusParams) -> Any:
    payload: Dict[str, Any] = {}
    if params.client_id is not None:
        payload["client_id"] = params.client_id
    return await ctx.bindings.commitments.call("commitments.status", _with_user(ctx, payload))


@TOOLS.register(
    "calendar.export_commitment_proof",
    description="Export a signed proof of time spent on a commitment as PDF or CSV.",
    validator=validate_export_commitment_proof_params,
    input_schema=object_schema(
        {
            "commitment_id": {"type": "string"},
            "format": {"type": "string", "enum": list(ProofFormat.values()), "default": "pdf"},
        },
        required=("commitment_id",),
    ),
)
async def export_commitment_proof(ctx: ToolContext, params: ExportCommitmentProofParams) -> Any:
    return await ctx.bindings.commitments.call(
        "commitments.export_proof",
        _with_user(ctx, {"commitment_id": params.commitment_id, "format": params.format.value}),
    )

"""Argument validation for every MCP tool.

Each ``validate_*`` function takes the loosely typed ``arguments`` object
from a ``tools/call`` request and returns a frozen, normalized parameter
object. Failures raise :class:`InvalidParamsError` with a message naming the
offending field, which the dispatcher relays verbatim to the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Type, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.timeutil import DAY_MS, parse_iso_ms
from ..domain import (
    BlockPolicy,
    BufferScope,
    BufferType,
    CalendarKind,
    ConstraintKind,
    DetailLevel,
    EventStatus,
    Granularity,
    InteractionOutcome,
    ProofFormat,
    RelationshipCategory,
)
from .errors import InvalidParamsError

Arguments = Mapping[str, Any]
E = TypeVar("E", bound=Enum)

DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500
DEFAULT_TIMEZONE = "UTC"
MAX_AVAILABILITY_RANGE_MS = 7 * DAY_MS
MIN_PROPOSAL_MINUTES = 15
MAX_PROPOSAL_MINUTES = 480
DEFAULT_MAX_CANDIDATES = 5
MAX_CANDIDATES_CEILING = 20
DEFAULT_CLOSENESS_WEIGHT = 0.5

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _require_string(args: Arguments, name: str) -> str:
    value = args.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidParamsError(f"'{name}' is required and must be a non-empty string")
    return value.strip()


def _optional_string(args: Arguments, name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidParamsError(f"'{name}' must be a string")
    return value


def _optional_identifier(args: Arguments, name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise InvalidParamsError(f"'{name}' must be a non-empty string")
    return value.strip()


def _timezone(args: Arguments, name: str = "timezone") -> str:
    return _optional_identifier(args, name) or DEFAULT_TIMEZONE


def _require_datetime(args: Arguments, name: str) -> Tuple[str, int]:
    raw = _require_string(args, name)
    parsed = parse_iso_ms(raw)
    if parsed is None:
        raise InvalidParamsError(f"'{name}' must be a valid ISO 8601 datetime")
    return raw, parsed


def _optional_datetime(args: Arguments, name: str) -> Optional[Tuple[str, int]]:
    if args.get(name) is None:
        return None
    return _require_datetime(args, name)


def _ensure_before(start_ms: int, end_ms: int, start_name: str, end_name: str) -> None:
    if start_ms >= end_ms:
        raise InvalidParamsError(f"'{start_name}' must be before '{end_name}'")


def _enum_value(value: Any, name: str, enum_cls: Type[E]) -> E:
    valid = [member.value for member in enum_cls]  # type: ignore[attr-defined]
    if not isinstance(value, str) or value not in valid:
        raise InvalidParamsError(f"'{name}' must be one of: {', '.join(valid)}")
    return enum_cls(value)


def _enum(args: Arguments, name: str, enum_cls: Type[E], default: Optional[E] = None) -> E:
    value = args.get(name)
    if value is None:
        if default is not None:
            return default
        valid = ", ".join(member.value for member in enum_cls)  # type: ignore[attr-defined]
        raise InvalidParamsError(f"'{name}' is required and must be one of: {valid}")
    return _enum_value(value, name, enum_cls)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _string_list(args: Arguments, name: str) -> Optional[Tuple[str, ...]]:
    value = args.get(name)
    if value is None:
        return None
    if not isinstance(value, list) or any(not isinstance(item, str) or not item.strip() for item in value):
        raise InvalidParamsError(f"'{name}' must be an array of non-empty strings")
    return tuple(item.strip() for item in value)


def _object(args: Arguments, name: str) -> Dict[str, Any]:
    value = args.get(name)
    if not isinstance(value, dict):
        raise InvalidParamsError(f"'{name}' is required and must be an object")
    return value


def _limit(args: Arguments) -> int:
    value = args.get("limit")
    if value is None:
        return DEFAULT_LIST_LIMIT
    if not _is_integer(value) or value < 1:
        raise InvalidParamsError("'limit' must be a positive integer")
    return min(int(value), MAX_LIST_LIMIT)


# ---------------------------------------------------------------------------
# Parameter objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoParams:
    pass


@dataclass(frozen=True, slots=True)
class GetSyncStatusParams:
    account_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ListEventsParams:
    start: str
    end: str
    start_ms: int
    end_ms: int
    limit: int = DEFAULT_LIST_LIMIT
    account_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CreateEventParams:
    title: str
    start_ts: str
    end_ts: str
    start_ms: int
    end_ms: int
    timezone: str = DEFAULT_TIMEZONE
    description: Optional[str] = None
    location: Optional[str] = None
    account_id: Optional[str] = None
    status: EventStatus = EventStatus.CONFIRMED


@dataclass(frozen=True, slots=True)
class EventPatch:
    """Partial update; ``provided`` records which keys the caller sent."""

    provided: FrozenSet[str]
    title: Optional[str] = None
    start_ts: Optional[str] = None
    end_ts: Optional[str] = None
    timezone: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[EventStatus] = None

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.provided)}


@dataclass(frozen=True, slots=True)
class UpdateEventParams:
    event_id: str
    patch: EventPatch


@dataclass(frozen=True, slots=True)
class DeleteEventParams:
    event_id: str


@dataclass(frozen=True, slots=True)
class GetAvailabilityParams:
    start_ms: int
    end_ms: int
    granularity: Granularity = Granularity.THIRTY_MINUTES
    accounts: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True, slots=True)
class PolicyEdgeKey:
    from_account: str
    to_account: str


@dataclass(frozen=True, slots=True)
class SetPolicyEdgeParams:
    from_account: str
    to_account: str
    detail_level: DetailLevel
    calendar_kind: CalendarKind = CalendarKind.BUSY_OVERLAY


@dataclass(frozen=True, slots=True)
class AddTripParams:
    name: str
    start: str
    end: str
    timezone: str = DEFAULT_TIMEZONE
    block_policy: BlockPolicy = BlockPolicy.BUSY

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": ConstraintKind.TRIP.value,
            "config_json": {
                "name": self.name,
                "timezone": self.timezone,
                "block_policy": self.block_policy.value,
            },
            "active_from": self.start,
            "active_to": self.end,
        }


@dataclass(frozen=True, slots=True)
class AddConstraintParams:
    kind: ConstraintKind
    config: Dict[str, Any] = field(default_factory=dict)
    active_from: Optional[str] = None
    active_to: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "config_json": dict(self.config),
            "active_from": self.active_from,
            "active_to": self.active_to,
        }


@dataclass(frozen=True, slots=True)
class ListConstraintsParams:
    kind: Optional[ConstraintKind] = None


@dataclass(frozen=True, slots=True)
class ProposeTimesParams:
    title: str
    duration_minutes: int
    window_start: str
    window_end: str
    required_account_ids: Tuple[str, ...]
    max_candidates: int = DEFAULT_MAX_CANDIDATES

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "duration_minutes": self.duration_minutes,
            "window_start": self.window_start,
            "window_end": self.window_end,
            "required_account_ids": list(self.required_account_ids),
            "max_candidates": self.max_candidates,
        }


@dataclass(frozen=True, slots=True)
class CommitCandidateParams:
    session_id: str
    candidate_id: str


@dataclass(frozen=True, slots=True)
class GetCommitmentStatusParams:
    client_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ExportCommitmentProofParams:
    commitment_id: str
    format: ProofFormat = ProofFormat.PDF


@dataclass(frozen=True, slots=True)
class AddRelationshipParams:
    participant_email: str
    category: RelationshipCategory
    display_name: Optional[str] = None
    closeness_weight: float = DEFAULT_CLOSENESS_WEIGHT
    city: Optional[str] = None
    timezone: Optional[str] = None
    interaction_frequency_target: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "participant_email": self.participant_email,
            "category": self.category.value,
            "display_name": self.display_name,
            "closeness_weight": self.closeness_weight,
            "city": self.city,
            "timezone": self.timezone,
            "interaction_frequency_target": self.interaction_frequency_target,
        }


@dataclass(frozen=True, slots=True)
class MarkOutcomeParams:
    relationship_id: str
    outcome: InteractionOutcome
    canonical_event_id: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ReconnectionSuggestionsParams:
    city: Optional[str] = None
    trip_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Accounts and sync
# ---------------------------------------------------------------------------


def validate_no_params(args: Arguments) -> NoParams:
    return NoParams()


def validate_get_sync_status_params(args: Arguments) -> GetSyncStatusParams:
    return GetSyncStatusParams(account_id=_optional_identifier(args, "account_id"))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def validate_list_events_params(args: Arguments) -> ListEventsParams:
    start, start_ms = _require_datetime(args, "start")
    end, end_ms = _require_datetime(args, "end")
    _ensure_before(start_ms, end_ms, "start", "end")
    return ListEventsParams(
        start=start,
        end=end,
        start_ms=start_ms,
        end_ms=end_ms,
        limit=_limit(args),
        account_id=_optional_identifier(args, "account_id"),
    )


def _event_status(args: Arguments) -> EventStatus:
    status = _enum(args, "status", EventStatus, default=EventStatus.CONFIRMED)
    if status is EventStatus.CANCELLED:
        raise InvalidParamsError("'status' must be one of: confirmed, tentative")
    return status


def _patch_status(patch: Arguments) -> EventStatus:
    # null is rejected rather than falling back to the create default
    return _enum_value(patch.get("status"), "status", EventStatus)


def validate_create_event_params(args: Arguments) -> CreateEventParams:
    title = _require_string(args, "title")
    start_ts, start_ms = _require_datetime(args, "start_ts")
    end_ts, end_ms = _require_datetime(args, "end_ts")
    _ensure_before(start_ms, end_ms, "start_ts", "end_ts")
    return CreateEventParams(
        title=title,
        start_ts=start_ts,
        end_ts=end_ts,
        start_ms=start_ms,
        end_ms=end_ms,
        timezone=_timezone(args),
        description=_optional_string(args, "description"),
        location=_optional_string(args, "location"),
        account_id=_optional_identifier(args, "account_id"),
        status=_event_status(args),
    )


_PATCH_FIELDS = ("title", "start_ts", "end_ts", "timezone", "description", "location", "status")


def validate_update_event_params(args: Arguments) -> UpdateEventParams:
    event_id = _require_string(args, "event_id")
    raw_patch = _object(args, "patch")
    present = frozenset(name for name in _PATCH_FIELDS if name in raw_patch)
    if not present:
        raise InvalidParamsError(
            f"'patch' must include at least one field to update ({', '.join(_PATCH_FIELDS)})"
        )

    values: Dict[str, Any] = {}
    if "title" in present:
        values["title"] = _require_string(raw_patch, "title")
    if "start_ts" in present:
        values["start_ts"], start_ms = _require_datetime(raw_patch, "start_ts")
    if "end_ts" in present:
        values["end_ts"], end_ms = _require_datetime(raw_patch, "end_ts")
    if "start_ts" in present and "end_ts" in present:
        _ensure_before(start_ms, end_ms, "start_ts", "end_ts")
    if "timezone" in present:
        values["timezone"] = _require_string(raw_patch, "timezone")
    # description and location accept null to clear the stored value
    if "description" in present:
        values["description"] = _optional_string(raw_patch, "description")
    if "location" in present:
        values["location"] = _optional_string(raw_patch, "location")
    if "status" in present:
        values["status"] = _patch_status(raw_patch)

    return UpdateEventParams(event_id=event_id, patch=EventPatch(provided=present, **values))


def validate_delete_event_params(args: Arguments) -> DeleteEventParams:
    return DeleteEventParams(event_id=_require_string(args, "event_id"))


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


def validate_get_availability_params(args: Arguments) -> GetAvailabilityParams:
    _, start_ms = _require_datetime(args, "start")
    _, end_ms = _require_datetime(args, "end")
    _ensure_before(start_ms, end_ms, "start", "end")
    if end_ms - start_ms > MAX_AVAILABILITY_RANGE_MS:
        raise InvalidParamsError("Time range between 'start' and 'end' must not exceed 7 days")
    granularity = _enum(args, "granularity", Granularity, default=Granularity.THIRTY_MINUTES)
    accounts = _string_list(args, "accounts")
    return GetAvailabilityParams(
        start_ms=start_ms,
        end_ms=end_ms,
        granularity=granularity,
        # An empty filter means "all accounts", not "no accounts".
        accounts=accounts or None,
    )


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


def _account_pair(args: Arguments) -> Tuple[str, str]:
    from_account = _require_string(args, "from_account")
    to_account = _require_string(args, "to_account")
    if from_account == to_account:
        raise InvalidParamsError("'from_account' and 'to_account' must be different accounts")
    return from_account, to_account


def validate_get_policy_edge_params(args: Arguments) -> PolicyEdgeKey:
    from_account, to_account = _account_pair(args)
    return PolicyEdgeKey(from_account=from_account, to_account=to_account)


def validate_set_policy_edge_params(args: Arguments) -> SetPolicyEdgeParams:
    from_account, to_account = _account_pair(args)
    return SetPolicyEdgeParams(
        from_account=from_account,
        to_account=to_account,
        detail_level=_enum(args, "detail_level", DetailLevel),
        calendar_kind=_enum(args, "calendar_kind", CalendarKind, default=CalendarKind.BUSY_OVERLAY),
    )


# ---------------------------------------------------------------------------
# Trips and constraints
# ---------------------------------------------------------------------------


def validate_add_trip_params(args: Arguments) -> AddTripParams:
    name = _require_string(args, "name")
    start, start_ms = _require_datetime(args, "start")
    end, end_ms = _require_datetime(args, "end")
    _ensure_before(start_ms, end_ms, "start", "end")
    return AddTripParams(
        name=name,
        start=start,
        end=end,
        timezone=_timezone(args),
        block_policy=_enum(args, "block_policy", BlockPolicy, default=BlockPolicy.BUSY),
    )


def _time_of_day(config: Arguments, name: str, kind: str) -> str:
    value = config.get(name)
    if not isinstance(value, str) or not _TIME_OF_DAY.match(value):
        raise InvalidParamsError(f"{kind} config '{name}' must be in HH:MM 24-hour format")
    return value


def _config_timezone(config: Arguments, kind: str, *, required: bool = True) -> None:
    value = config.get("timezone")
    if value is None and not required:
        return
    if not isinstance(value, str) or not value.strip():
        raise InvalidParamsError(f"{kind} config 'timezone' must be a non-empty string")


def _validate_working_hours(config: Arguments) -> None:
    days = config.get("days")
    if not isinstance(days, list) or not days:
        raise InvalidParamsError("working_hours config 'days' must be a non-empty array")
    for day in days:
        if not _is_integer(day) or not 0 <= day <= 6:
            raise InvalidParamsError(f"working_hours config 'days' values must be integers 0-6, got {day!r}")
    start_time = _time_of_day(config, "start_time", "working_hours")
    end_time = _time_of_day(config, "end_time", "working_hours")
    if end_time <= start_time:
        raise InvalidParamsError("working_hours config 'end_time' must be after 'start_time'")
    _config_timezone(config, "working_hours")


def _validate_buffer(config: Arguments) -> None:
    _enum_value(config.get("type"), "type", BufferType)
    minutes = config.get("minutes")
    if not _is_integer(minutes) or minutes <= 0:
        raise InvalidParamsError("buffer config 'minutes' must be a positive integer")
    _enum_value(config.get("applies_to"), "applies_to", BufferScope)


def _validate_no_meetings_after(config: Arguments) -> None:
    _time_of_day(config, "time", "no_meetings_after")
    _config_timezone(config, "no_meetings_after")


def _validate_override(config: Arguments) -> None:
    reason = config.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        raise InvalidParamsError("override config 'reason' must be a non-empty string")
    slot_start = _optional_datetime(config, "slot_start")
    slot_end = _optional_datetime(config, "slot_end")
    if slot_start and slot_end:
        _ensure_before(slot_start[1], slot_end[1], "slot_start", "slot_end")
    _config_timezone(config, "override", required=False)
    timezone = config.get("timezone")
    if timezone is not None:
        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidParamsError(f"override config 'timezone' {timezone!r} is not a valid IANA timezone") from exc


_CONFIG_VALIDATORS = {
    ConstraintKind.WORKING_HOURS: _validate_working_hours,
    ConstraintKind.BUFFER: _validate_buffer,
    ConstraintKind.NO_MEETINGS_AFTER: _validate_no_meetings_after,
    ConstraintKind.OVERRIDE: _validate_override,
}

CONSTRAINT_KINDS = tuple(_CONFIG_VALIDATORS)


def validate_add_constraint_params(args: Arguments) -> AddConstraintParams:
    kind = _enum(args, "kind", ConstraintKind)
    if kind not in CONSTRAINT_KINDS:
        valid = ", ".join(member.value for member in CONSTRAINT_KINDS)
        raise InvalidParamsError(f"'kind' must be one of: {valid} (use calendar.add_trip for trips)")
    config = _object(args, "config")
    active_from = _optional_datetime(args, "active_from")
    active_to = _optional_datetime(args, "active_to")
    if active_from and active_to:
        _ensure_before(active_from[1], active_to[1], "active_from", "active_to")
    _CONFIG_VALIDATORS[kind](config)
    return AddConstraintParams(
        kind=kind,
        config=dict(config),
        active_from=active_from[0] if active_from else None,
        active_to=active_to[0] if active_to else None,
    )


def validate_list_constraints_params(args: Arguments) -> ListConstraintsParams:
    if args.get("kind") is None:
        return ListConstraintsParams()
    return ListConstraintsParams(kind=_enum(args, "kind", ConstraintKind))


# ---------------------------------------------------------------------------
# Scheduling and commitments
# ---------------------------------------------------------------------------


def validate_propose_times_params(args: Arguments) -> ProposeTimesParams:
    title = _require_string(args, "title")
    duration = args.get("duration_minutes")
    if not _is_integer(duration):
        raise InvalidParamsError("'duration_minutes' is required and must be an integer")
    if not MIN_PROPOSAL_MINUTES <= duration <= MAX_PROPOSAL_MINUTES:
        raise InvalidParamsError(
            f"'duration_minutes' must be between {MIN_PROPOSAL_MINUTES} and {MAX_PROPOSAL_MINUTES}"
        )
    window_start, start_ms = _require_datetime(args, "window_start")
    window_end, end_ms = _require_datetime(args, "window_end")
    _ensure_before(start_ms, end_ms, "window_start", "window_end")
    accounts = _string_list(args, "required_account_ids")
    if not accounts:
        raise InvalidParamsError("'required_account_ids' is required and must be a non-empty array of strings")

    max_candidates = args.get("max_candidates")
    if max_candidates is None:
        max_candidates = DEFAULT_MAX_CANDIDATES
    elif not _is_integer(max_candidates) or not 1 <= max_candidates <= MAX_CANDIDATES_CEILING:
        raise InvalidParamsError(f"'max_candidates' must be an integer between 1 and {MAX_CANDIDATES_CEILING}")

    return ProposeTimesParams(
        title=title,
        duration_minutes=int(duration),
        window_start=window_start,
        window_end=window_end,
        required_account_ids=accounts,
        max_candidates=int(max_candidates),
    )


def validate_commit_candidate_params(args: Arguments) -> CommitCandidateParams:
    return CommitCandidateParams(
        session_id=_require_string(args, "session_id"),
        candidate_id=_require_string(args, "candidate_id"),
    )


def validate_get_commitment_status_params(args: Arguments) -> GetCommitmentStatusParams:
    return GetCommitmentStatusParams(client_id=_optional_identifier(args, "client_id"))


def validate_export_commitment_proof_params(args: Arguments) -> ExportCommitmentProofParams:
    return ExportCommitmentProofParams(
        commitment_id=_require_string(args, "commitment_id"),
        format=_enum(args, "format", ProofFormat, default=ProofFormat.PDF),
    )


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


def validate_add_relationship_params(args: Arguments) -> AddRelationshipParams:
    email = _require_string(args, "participant_email")
    if not _EMAIL.match(email):
        raise InvalidParamsError("'participant_email' must be a valid email address")

    weight = args.get("closeness_weight")
    if weight is None:
        weight = DEFAULT_CLOSENESS_WEIGHT
    elif not _is_number(weight) or not 0 <= weight <= 1:
        raise InvalidParamsError("'closeness_weight' must be a number between 0 and 1")

    frequency = args.get("interaction_frequency_target")
    if frequency is not None and (not _is_integer(frequency) or frequency <= 0):
        raise InvalidParamsError("'interaction_frequency_target' must be a positive integer (days)")

    return AddRelationshipParams(
        participant_email=email.lower(),
        category=_enum(args, "category", RelationshipCategory),
        display_name=_optional_identifier(args, "display_name"),
        closeness_weight=float(weight),
        city=_optional_identifier(args, "city"),
        timezone=_optional_identifier(args, "timezone"),
        interaction_frequency_target=int(frequency) if frequency is not None else None,
    )


def validate_mark_outcome_params(args: Arguments) -> MarkOutcomeParams:
    return MarkOutcomeParams(
        relationship_id=_require_string(args, "relationship_id"),
        outcome=_enum(args, "outcome", InteractionOutcome),
        canonical_event_id=_optional_identifier(args, "canonical_event_id"),
        note=_optional_string(args, "note"),
    )


def validate_reconnection_suggestions_params(args: Arguments) -> ReconnectionSuggestionsParams:
    return ReconnectionSuggestionsParams(
        city=_optional_identifier(args, "city"),
        trip_id=_optional_identifier(args, "trip_id"),
    )

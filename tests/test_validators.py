"""
Tests for tool argument validators.
"""

import pytest

from tminus_mcp.api.errors import InvalidParamsError
from tminus_mcp.api.validators import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    validate_add_constraint_params,
    validate_add_relationship_params,
    validate_add_trip_params,
    validate_create_event_params,
    validate_export_commitment_proof_params,
    validate_get_availability_params,
    validate_list_events_params,
    validate_mark_outcome_params,
    validate_propose_times_params,
    validate_set_policy_edge_params,
    validate_update_event_params,
)
from tminus_mcp.domain import (
    BlockPolicy,
    CalendarKind,
    ConstraintKind,
    DetailLevel,
    EventStatus,
    Granularity,
    ProofFormat,
    RelationshipCategory,
)

RANGE = {"start": "2026-03-15T09:00:00Z", "end": "2026-03-15T11:00:00Z"}
EVENT = {"title": "Standup", "start_ts": "2026-03-15T09:00:00Z", "end_ts": "2026-03-15T09:15:00Z"}


def assert_invalid(validator, args, fragment):
    with pytest.raises(InvalidParamsError) as excinfo:
        validator(args)
    assert fragment in str(excinfo.value)


class TestListEvents:
    def test_defaults(self):
        params = validate_list_events_params(dict(RANGE))

        assert params.limit == DEFAULT_LIST_LIMIT
        assert params.account_id is None
        assert params.start == RANGE["start"]

    @pytest.mark.parametrize("missing", ["start", "end"])
    def test_required_fields(self, missing):
        args = dict(RANGE)
        del args[missing]
        assert_invalid(validate_list_events_params, args, f"'{missing}' is required")

    @pytest.mark.parametrize("value", [None, 42, "", "   "])
    def test_rejects_non_strings_and_blanks_alike(self, value):
        assert_invalid(validate_list_events_params, {**RANGE, "start": value}, "'start' is required")

    def test_rejects_unparseable_datetime(self):
        assert_invalid(validate_list_events_params, {**RANGE, "end": "tomorrow"}, "'end' must be a valid ISO 8601")

    def test_start_must_precede_end(self):
        assert_invalid(validate_list_events_params, {**RANGE, "end": RANGE["start"]}, "before")

    def test_limit_is_clamped(self):
        assert validate_list_events_params({**RANGE, "limit": 10_000}).limit == MAX_LIST_LIMIT

    @pytest.mark.parametrize("limit", [0, -3, "10", True, 2.5])
    def test_rejects_bad_limits(self, limit):
        assert_invalid(validate_list_events_params, {**RANGE, "limit": limit}, "'limit'")


class TestCreateEvent:
    def test_defaults(self):
        params = validate_create_event_params(dict(EVENT))

        assert params.timezone == "UTC"
        assert params.status is EventStatus.CONFIRMED
        assert params.start_ts == EVENT["start_ts"]
        assert params.end_ts == EVENT["end_ts"]

    def test_title_required(self):
        assert_invalid(validate_create_event_params, {**EVENT, "title": "  "}, "'title' is required")

    def test_end_before_start(self):
        args = {**EVENT, "end_ts": "2026-03-15T08:00:00Z"}
        assert_invalid(validate_create_event_params, args, "'start_ts' must be before 'end_ts'")

    def test_cancelled_is_not_creatable(self):
        assert_invalid(validate_create_event_params, {**EVENT, "status": "cancelled"}, "'status'")


class TestUpdateEvent:
    def test_empty_patch_rejected(self):
        assert_invalid(
            validate_update_event_params, {"event_id": "evt_1", "patch": {}}, "at least one field to update"
        )

    def test_patch_must_be_object(self):
        assert_invalid(validate_update_event_params, {"event_id": "evt_1", "patch": "title"}, "'patch'")

    def test_present_fields_use_full_rules(self):
        assert_invalid(
            validate_update_event_params,
            {"event_id": "evt_1", "patch": {"start_ts": "nope"}},
            "'start_ts' must be a valid ISO 8601",
        )

    def test_null_description_clears(self):
        params = validate_update_event_params({"event_id": "evt_1", "patch": {"description": None, "title": "X"}})

        assert params.patch.changes() == {"description": None, "title": "X"}

    def test_paired_times_checked_together(self):
        patch = {"start_ts": "2026-03-15T10:00:00Z", "end_ts": "2026-03-15T09:00:00Z"}
        assert_invalid(validate_update_event_params, {"event_id": "evt_1", "patch": patch}, "before")

    def test_patch_may_cancel(self):
        params = validate_update_event_params({"event_id": "evt_1", "patch": {"status": "cancelled"}})

        assert params.patch.changes() == {"status": EventStatus.CANCELLED}

    def test_null_status_rejected(self):
        assert_invalid(
            validate_update_event_params,
            {"event_id": "evt_1", "patch": {"status": None}},
            "'status' must be one of: confirmed, tentative, cancelled",
        )


class TestGetAvailability:
    def test_defaults(self):
        params = validate_get_availability_params(dict(RANGE))

        assert params.granularity is Granularity.THIRTY_MINUTES
        assert params.accounts is None

    def test_empty_accounts_means_no_filter(self):
        assert validate_get_availability_params({**RANGE, "accounts": []}).accounts is None

    def test_accounts_filter(self):
        params = validate_get_availability_params({**RANGE, "accounts": ["acc_a", "acc_b"]})

        assert params.accounts == ("acc_a", "acc_b")

    @pytest.mark.parametrize("accounts", ["acc_a", [""], ["acc_a", 3]])
    def test_bad_accounts_filter(self, accounts):
        assert_invalid(validate_get_availability_params, {**RANGE, "accounts": accounts}, "'accounts'")

    @pytest.mark.parametrize("granularity", ["5m", "", 30, "1H"])
    def test_bad_granularity(self, granularity):
        assert_invalid(validate_get_availability_params, {**RANGE, "granularity": granularity}, "15m, 30m, 1h")

    def test_range_limited_to_seven_days(self):
        args = {"start": "2026-03-01T00:00:00Z", "end": "2026-03-08T00:00:01Z"}
        assert_invalid(validate_get_availability_params, args, "7 days")

    def test_exactly_seven_days_is_allowed(self):
        args = {"start": "2026-03-01T00:00:00Z", "end": "2026-03-08T00:00:00Z", "granularity": "1h"}

        assert validate_get_availability_params(args).granularity is Granularity.ONE_HOUR


class TestPolicyEdge:
    def test_defaults_to_busy_overlay(self):
        params = validate_set_policy_edge_params(
            {"from_account": "acc_a", "to_account": "acc_b", "detail_level": "TITLE"}
        )

        assert params.detail_level is DetailLevel.TITLE
        assert params.calendar_kind is CalendarKind.BUSY_OVERLAY

    def test_detail_level_required_and_closed(self):
        args = {"from_account": "acc_a", "to_account": "acc_b", "detail_level": "title"}
        assert_invalid(validate_set_policy_edge_params, args, "detail_level")

    def test_self_edge_rejected(self):
        args = {"from_account": "acc_a", "to_account": "acc_a", "detail_level": "BUSY"}
        assert_invalid(validate_set_policy_edge_params, args, "different")


class TestScheduling:
    def test_trip_defaults(self):
        params = validate_add_trip_params({"name": "Berlin", **RANGE})

        assert params.block_policy is BlockPolicy.BUSY
        assert params.to_payload()["config_json"] == {"name": "Berlin", "timezone": "UTC", "block_policy": "BUSY"}

    def test_working_hours(self):
        config = {"days": [1, 2, 3, 4, 5], "start_time": "09:00", "end_time": "17:30", "timezone": "Europe/Berlin"}
        params = validate_add_constraint_params({"kind": "working_hours", "config": config})

        assert params.kind is ConstraintKind.WORKING_HOURS

    @pytest.mark.parametrize(
        "config,fragment",
        [
            ({"days": [], "start_time": "09:00", "end_time": "17:00", "timezone": "UTC"}, "'days'"),
            ({"days": [7], "start_time": "09:00", "end_time": "17:00", "timezone": "UTC"}, "0-6"),
            ({"days": [1], "start_time": "9am", "end_time": "17:00", "timezone": "UTC"}, "HH:MM"),
            ({"days": [1], "start_time": "17:00", "end_time": "09:00", "timezone": "UTC"}, "after"),
            ({"days": [1], "start_time": "09:00", "end_time": "17:00"}, "'timezone'"),
        ],
    )
    def test_working_hours_rejections(self, config, fragment):
        assert_invalid(validate_add_constraint_params, {"kind": "working_hours", "config": config}, fragment)

    @pytest.mark.parametrize(
        "config,fragment",
        [
            ({"type": "nap", "minutes": 10, "applies_to": "all"}, "'type'"),
            ({"type": "prep", "minutes": 0, "applies_to": "all"}, "'minutes'"),
            ({"type": "prep", "minutes": 10, "applies_to": "some"}, "'applies_to'"),
        ],
    )
    def test_buffer_rejections(self, config, fragment):
        assert_invalid(validate_add_constraint_params, {"kind": "buffer", "config": config}, fragment)

    def test_override_requires_reason(self):
        assert_invalid(validate_add_constraint_params, {"kind": "override", "config": {"reason": ""}}, "'reason'")

    def test_override_rejects_unknown_timezone(self):
        config = {"reason": "board meeting", "timezone": "Mars/Olympus"}
        assert_invalid(validate_add_constraint_params, {"kind": "override", "config": config}, "IANA")

    def test_active_window_must_be_ordered(self):
        args = {
            "kind": "no_meetings_after",
            "config": {"time": "18:00", "timezone": "UTC"},
            "active_from": "2026-04-01T00:00:00Z",
            "active_to": "2026-03-01T00:00:00Z",
        }
        assert_invalid(validate_add_constraint_params, args, "'active_from' must be before 'active_to'")

    def test_unknown_constraint_kind(self):
        assert_invalid(validate_add_constraint_params, {"kind": "vacation", "config": {}}, "'kind'")

    def test_trip_kind_goes_through_add_trip(self):
        args = {
            "kind": "trip",
            "config": {"name": "Lisbon", "timezone": "UTC", "block_policy": "BUSY"},
            "active_from": "2026-04-01T00:00:00Z",
            "active_to": "2026-04-05T00:00:00Z",
        }
        assert_invalid(validate_add_constraint_params, args, "calendar.add_trip")

    def test_propose_times(self):
        params = validate_propose_times_params(
            {
                "title": "Sync",
                "duration_minutes": 30,
                "window_start": RANGE["start"],
                "window_end": RANGE["end"],
                "required_account_ids": ["acc_a"],
            }
        )

        assert params.max_candidates == 5
        assert params.to_payload()["required_account_ids"] == ["acc_a"]

    @pytest.mark.parametrize("duration", [14, 481, "30", None])
    def test_propose_times_duration_bounds(self, duration):
        args = {
            "title": "Sync",
            "duration_minutes": duration,
            "window_start": RANGE["start"],
            "window_end": RANGE["end"],
            "required_account_ids": ["acc_a"],
        }
        assert_invalid(validate_propose_times_params, args, "'duration_minutes'")

    def test_propose_times_requires_accounts(self):
        args = {
            "title": "Sync",
            "duration_minutes": 30,
            "window_start": RANGE["start"],
            "window_end": RANGE["end"],
            "required_account_ids": [],
        }
        assert_invalid(validate_propose_times_params, args, "'required_account_ids'")

    def test_proof_format(self):
        assert validate_export_commitment_proof_params({"commitment_id": "cmt_1"}).format is ProofFormat.PDF
        assert_invalid(
            validate_export_commitment_proof_params, {"commitment_id": "cmt_1", "format": "docx"}, "pdf, csv"
        )


class TestRelationships:
    def test_add_relationship_normalizes(self):
        params = validate_add_relationship_params({"participant_email": "Ada@Example.com", "category": "INVESTOR"})

        assert params.participant_email == "ada@example.com"
        assert params.category is RelationshipCategory.INVESTOR
        assert params.closeness_weight == 0.5

    @pytest.mark.parametrize(
        "args,fragment",
        [
            ({"participant_email": "not-an-email", "category": "FRIEND"}, "email"),
            ({"participant_email": "a@b.co", "category": "ENEMY"}, "'category'"),
            ({"participant_email": "a@b.co", "category": "FRIEND", "closeness_weight": 1.5}, "closeness_weight"),
            ({"participant_email": "a@b.co", "category": "FRIEND", "interaction_frequency_target": 0}, "frequency"),
        ],
    )
    def test_add_relationship_rejections(self, args, fragment):
        assert_invalid(validate_add_relationship_params, args, fragment)

    def test_mark_outcome_requires_known_outcome(self):
        assert_invalid(validate_mark_outcome_params, {"relationship_id": "rel_1", "outcome": "GHOSTED"}, "'outcome'")

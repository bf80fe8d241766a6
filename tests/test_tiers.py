"""
Tests for tier ordering and per-tool access control.
"""

import pytest

from tminus_mcp.core.tiers import TIER_REQUIRED_CODE, TOOL_TIERS, check_tier_access
from tminus_mcp.domain import Tier

ALL_TOOLS = sorted(TOOL_TIERS)


@pytest.mark.parametrize("tool", ALL_TOOLS)
def test_enterprise_can_call_everything(tool):
    assert check_tier_access(tool, "enterprise").allowed


@pytest.mark.parametrize("tool", ALL_TOOLS)
def test_premium_covers_whatever_free_cannot(tool):
    if not check_tier_access(tool, "free").allowed:
        assert check_tier_access(tool, "premium").allowed or TOOL_TIERS[tool] is Tier.ENTERPRISE


@pytest.mark.parametrize("tool", ALL_TOOLS)
def test_higher_tiers_are_supersets(tool):
    allowed = [check_tier_access(tool, tier).allowed for tier in ("unknown", "free", "premium", "enterprise")]
    assert allowed == sorted(allowed)


def test_free_tier_denied_create_event():
    access = check_tier_access("calendar.create_event", "free")

    assert not access.allowed
    assert access.to_error_data() == {
        "code": TIER_REQUIRED_CODE,
        "required_tier": "premium",
        "current_tier": "free",
        "tool": "calendar.create_event",
    }


def test_unknown_tier_string_ranks_below_free():
    access = check_tier_access("calendar.list_accounts", "platinum")

    assert not access.allowed
    assert access.current_tier == "platinum"
    assert Tier.parse("platinum").level == 0


def test_tools_absent_from_map_default_to_free():
    assert check_tier_access("calendar.something_new", "free").allowed
    assert not check_tier_access("calendar.something_new", "bogus").allowed


def test_custom_tier_map():
    access = check_tier_access("calendar.list_events", "premium", {"calendar.list_events": Tier.ENTERPRISE})

    assert not access.allowed
    assert access.required_tier is Tier.ENTERPRISE


@pytest.mark.parametrize(
    "tool,tier",
    [
        ("calendar.list_accounts", Tier.FREE),
        ("calendar.get_availability", Tier.FREE),
        ("calendar.list_constraints", Tier.FREE),
        ("calendar.set_policy_edge", Tier.PREMIUM),
        ("calendar.export_commitment_proof", Tier.PREMIUM),
        ("calendar.get_drift_report", Tier.ENTERPRISE),
    ],
)
def test_tier_assignments(tool, tier):
    assert TOOL_TIERS[tool] is tier

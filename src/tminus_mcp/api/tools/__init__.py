"""Tool handlers grouped by concern."""

from __future__ import annotations

from typing import Mapping, Optional

from ...core.tiers import TOOL_TIERS
from ...domain import Tier
from ..registry import ToolRegistry
from . import accounts, availability, events, policies, relationships, scheduling

TOOL_SETS = (
    accounts.TOOLS,
    events.TOOLS,
    availability.TOOLS,
    policies.TOOLS,
    scheduling.TOOLS,
    relationships.TOOLS,
)


def build_tool_registry(tier_map: Optional[Mapping[str, Tier]] = None) -> ToolRegistry:
    return ToolRegistry(
        (tool for tool_set in TOOL_SETS for tool in tool_set),
        tier_map=TOOL_TIERS if tier_map is None else tier_map,
    )


__all__ = ["TOOL_SETS", "build_tool_registry"]

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..domain import Tier

TIER_REQUIRED_CODE = "TIER_REQUIRED"

TOOL_TIERS: Mapping[str, Tier] = MappingProxyType(
    {
        # Read-only tools
        "calendar.list_accounts": Tier.FREE,
        "calendar.get_sync_status": Tier.FREE,
        "calendar.list_events": Tier.FREE,
        "calendar.get_availability": Tier.FREE,
        "calendar.list_policies": Tier.FREE,
        "calendar.get_policy_edge": Tier.FREE,
        "calendar.list_constraints": Tier.FREE,
        # Write and scheduling tools
        "calendar.create_event": Tier.PREMIUM,
        "calendar.update_event": Tier.PREMIUM,
        "calendar.delete_event": Tier.PREMIUM,
        "calendar.set_policy_edge": Tier.PREMIUM,
        "calendar.add_trip": Tier.PREMIUM,
        "calendar.add_constraint": Tier.PREMIUM,
        "calendar.propose_times": Tier.PREMIUM,
        "calendar.commit_candidate": Tier.PREMIUM,
        "calendar.get_commitment_status": Tier.PREMIUM,
        "calendar.export_commitment_proof": Tier.PREMIUM,
        # Relationship tools
        "calendar.add_relationship": Tier.ENTERPRISE,
        "calendar.get_drift_report": Tier.ENTERPRISE,
        "calendar.mark_outcome": Tier.ENTERPRISE,
        "calendar.get_reconnection_suggestions": Tier.ENTERPRISE,
    }
)


@dataclass(frozen=True, slots=True)
class TierAccess:
    allowed: bool
    tool: str
    required_tier: Tier
    current_tier: str

    def to_error_data(self) -> Dict[str, Any]:
        return {
            "code": TIER_REQUIRED_CODE,
            "required_tier": self.required_tier.value,
            "current_tier": self.current_tier,
            "tool": self.tool,
        }


def required_tier_for(tool_name: str, tier_map: Optional[Mapping[str, Tier]] = None) -> Tier:
    mapping = TOOL_TIERS if tier_map is None else tier_map
    return mapping.get(tool_name, Tier.FREE)


def is_tier_sufficient(caller_tier: object, required_tier: Tier) -> bool:
    return Tier.parse(caller_tier).level >= required_tier.level


def check_tier_access(
    tool_name: str,
    caller_tier: object,
    tier_map: Optional[Mapping[str, Tier]] = None,
) -> TierAccess:
    """Decide whether ``caller_tier`` may call ``tool_name``.

    Tools absent from the map are open to every authenticated caller.
    """

    required = required_tier_for(tool_name, tier_map)
    current = caller_tier.value if isinstance(caller_tier, Tier) else str(caller_tier)
    return TierAccess(
        allowed=is_tier_sufficient(caller_tier, required),
        tool=tool_name,
        required_tier=required,
        current_tier=current,
    )


__all__ = [
    "TIER_REQUIRED_CODE",
    "TOOL_TIERS",
    "TierAccess",
    "check_tier_access",
    "is_tier_sufficient",
    "required_tier_for",
]

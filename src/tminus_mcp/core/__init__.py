"""Pure computation: availability, sync health and tier access."""

from __future__ import annotations

from .availability import (
    AvailabilitySlot,
    CalendarEventForAvailability,
    TimeSlot,
    compute_availability_slots,
    generate_time_slots,
)
from .health import compute_channel_status, compute_health_status, compute_overall_health
from .tiers import TIER_REQUIRED_CODE, TOOL_TIERS, TierAccess, check_tier_access

__all__ = [
    "AvailabilitySlot",
    "CalendarEventForAvailability",
    "TIER_REQUIRED_CODE",
    "TOOL_TIERS",
    "TierAccess",
    "TimeSlot",
    "check_tier_access",
    "compute_availability_slots",
    "compute_channel_status",
    "compute_health_status",
    "compute_overall_health",
    "generate_time_slots",
]

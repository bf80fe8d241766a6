from __future__ import annotations

from typing import Iterable, Optional

from ..domain import ChannelStatus, SyncHealth
from .timeutil import HOUR_MS, parse_iso_ms

HEALTHY_MAX_AGE_MS = 1 * HOUR_MS
DEGRADED_MAX_AGE_MS = 6 * HOUR_MS
STALE_MAX_AGE_MS = 24 * HOUR_MS

ERROR_ACCOUNT_STATUS = "error"


def compute_health_status(account_status: Optional[str], last_sync_iso: Optional[str], now_ms: int) -> SyncHealth:
    """Grade one account from its stored status and the age of its last sync."""

    if account_status == ERROR_ACCOUNT_STATUS:
        return SyncHealth.ERROR
    last_sync_ms = parse_iso_ms(last_sync_iso)
    if last_sync_ms is None:
        return SyncHealth.UNHEALTHY
    age_ms = now_ms - last_sync_ms
    if age_ms <= HEALTHY_MAX_AGE_MS:
        return SyncHealth.HEALTHY
    if age_ms <= DEGRADED_MAX_AGE_MS:
        return SyncHealth.DEGRADED
    if age_ms <= STALE_MAX_AGE_MS:
        return SyncHealth.STALE
    return SyncHealth.UNHEALTHY


def compute_overall_health(statuses: Iterable[SyncHealth | str]) -> SyncHealth:
    """Worst grade present, ``healthy`` when there is nothing to grade."""

    return max((SyncHealth(status) for status in statuses), key=lambda item: item.severity, default=SyncHealth.HEALTHY)


def compute_channel_status(channel_id: Optional[str], expiry_iso: Optional[str], now_ms: int) -> ChannelStatus:
    if not channel_id:
        return ChannelStatus.NONE
    expiry_ms = parse_iso_ms(expiry_iso)
    # Missing or unparseable expiry fails open.
    if expiry_ms is None or expiry_ms > now_ms:
        return ChannelStatus.ACTIVE
    return ChannelStatus.EXPIRED


__all__ = [
    "DEGRADED_MAX_AGE_MS",
    "HEALTHY_MAX_AGE_MS",
    "STALE_MAX_AGE_MS",
    "compute_channel_status",
    "compute_health_status",
    "compute_overall_health",
]

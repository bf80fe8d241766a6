from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from ..data.supabase import SupabaseGateway
from ..domain import Tier, UserContext

logger = logging.getLogger(__name__)

Authenticator = Callable[[Optional[str]], Awaitable[Optional[UserContext]]]

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def _metadata_tier(metadata: Any) -> Optional[str]:
    if isinstance(metadata, Mapping):
        tier = metadata.get("tier")
        if isinstance(tier, str) and tier:
            return tier
    return None


def user_context_from_supabase(user: Any) -> Optional[UserContext]:
    """Build a caller context from a Supabase ``User``.

    The tier is read from ``app_metadata`` first since users cannot edit it,
    then from ``user_metadata``.
    """

    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    tier = (
        _metadata_tier(getattr(user, "app_metadata", None))
        or _metadata_tier(getattr(user, "user_metadata", None))
        or Tier.FREE.value
    )
    return UserContext(user_id=str(user_id), email=getattr(user, "email", None) or "", tier=tier)


@dataclass(slots=True)
class SupabaseAuthenticator:
    gateway: SupabaseGateway

    async def __call__(self, authorization: Optional[str]) -> Optional[UserContext]:
        token = extract_bearer_token(authorization)
        if token is None:
            return None
        if not self.gateway.is_configured:
            logger.warning("Rejecting request: Supabase authentication is not configured")
            return None
        try:
            client = self.gateway.ensure_client()
            response = await asyncio.to_thread(client.auth.get_user, token)
        except Exception as exc:  # noqa: BLE001
            logger.info("Rejected bearer credential: %s", exc.__class__.__name__)
            return None
        user = getattr(response, "user", None)
        context = user_context_from_supabase(user) if user is not None else None
        if context is None:
            logger.info("Rejected bearer credential: no user attached")
        return context


__all__ = [
    "Authenticator",
    "SupabaseAuthenticator",
    "extract_bearer_token",
    "user_context_from_supabase",
]

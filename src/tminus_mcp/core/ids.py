from __future__ import annotations

from uuid import uuid4

EVENT_PREFIX = "evt"
POLICY_PREFIX = "pol"


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"

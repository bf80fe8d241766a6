from __future__ import annotations

from typing import Any, Dict

import orjson

from ..domain import AccountRecord, McpEvent, PolicyEdge
from .models import AccountHealthPayload, AccountPayload, EventPayload, PolicyPayload


def serialize_account(account: AccountRecord, now_ms: int) -> Dict[str, Any]:
    return AccountPayload.from_domain(account, now_ms).model_dump()


def serialize_account_health(account: AccountRecord, now_ms: int) -> Dict[str, Any]:
    return AccountHealthPayload.from_domain(account, now_ms).model_dump()


def serialize_event(event: McpEvent) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump()


def serialize_policy(policy: PolicyEdge) -> Dict[str, Any]:
    return PolicyPayload.from_domain(policy).model_dump()


def text_content(result: Any) -> Dict[str, Any]:
    """Wrap a handler result in the MCP ``content`` envelope."""

    text = orjson.dumps(result, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
    return {"content": [{"type": "text", "text": text}]}

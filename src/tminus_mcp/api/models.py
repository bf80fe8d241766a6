from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.health import compute_channel_status, compute_health_status
from ..domain import AccountRecord, McpEvent, PolicyEdge

RequestId = Union[str, int, float, None]


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Dict[str, Any]] = Field(default=None)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class JsonRpcResponse(BaseModel):
    """Exactly one of ``result`` / ``error`` is emitted; ``id`` is always echoed."""

    jsonrpc: str = "2.0"
    id: Any = None
    result: Optional[Any] = Field(default=None)
    error: Optional[JsonRpcError] = Field(default=None)

    @classmethod
    def success(cls, request_id: RequestId, result: Any) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: RequestId,
        code: int,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> "JsonRpcResponse":
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            payload["error"] = self.error.to_payload()
        else:
            payload["result"] = self.result
        payload["id"] = self.id
        return payload


class AccountPayload(BaseModel):
    account_id: str
    provider: str
    email: str
    status: str
    channel_status: str

    @classmethod
    def from_domain(cls, account: AccountRecord, now_ms: int) -> "AccountPayload":
        return cls(
            account_id=account.account_id,
            provider=account.provider,
            email=account.email,
            status=account.status,
            channel_status=compute_channel_status(account.channel_id, account.channel_expiry_ts, now_ms).value,
        )


class AccountHealthPayload(BaseModel):
    account_id: str
    provider: str
    email: str
    status: str
    health: str
    last_sync_ts: Optional[str] = Field(default=None)
    channel_status: str
    error_count: int = 0

    @classmethod
    def from_domain(cls, account: AccountRecord, now_ms: int) -> "AccountHealthPayload":
        return cls(
            account_id=account.account_id,
            provider=account.provider,
            email=account.email,
            status=account.status,
            health=compute_health_status(account.status, account.last_sync_ts, now_ms).value,
            last_sync_ts=account.last_sync_ts,
            channel_status=compute_channel_status(account.channel_id, account.channel_expiry_ts, now_ms).value,
            error_count=account.error_count,
        )


class SyncStatusPayload(BaseModel):
    overall: str
    accounts: List[AccountHealthPayload] = Field(default_factory=list)


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str
    user_id: str
    account_id: Optional[str] = Field(default=None)
    title: str
    start_ts: str
    end_ts: str
    timezone: str = "UTC"
    description: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    status: str
    source: str = "mcp"
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: McpEvent) -> "EventPayload":
        return cls(
            event_id=event.event_id,
            user_id=event.user_id,
            account_id=event.account_id,
            title=event.title,
            start_ts=event.start_ts,
            end_ts=event.end_ts,
            timezone=event.timezone,
            description=event.description,
            location=event.location,
            status=event.status.value,
            source=event.source,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class PolicyPayload(BaseModel):
    policy_id: str
    from_account: str
    to_account: str
    detail_level: str
    calendar_kind: str
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, policy: PolicyEdge) -> "PolicyPayload":
        return cls(
            policy_id=policy.policy_id,
            from_account=policy.from_account,
            to_account=policy.to_account,
            detail_level=policy.detail_level.value,
            calendar_kind=policy.calendar_kind.value,
            created_at=policy.created_at,
            updated_at=policy.updated_at,
        )

"""
Pytest configuration and shared fixtures for the MCP server tests.
"""

from typing import Any, Dict, List, Optional, Tuple

import orjson
import pytest

from tminus_mcp.api import McpDispatcher, McpServer, build_tool_registry
from tminus_mcp.api.dispatch import JsonRpcRequest
from tminus_mcp.api.errors import ServiceUnavailableError
from tminus_mcp.core.timeutil import parse_iso_ms
from tminus_mcp.data import AccountRepository, SqliteDatabase
from tminus_mcp.domain import AccountRecord, UserContext
from tminus_mcp.services.bindings import ServiceBindings

FIXED_NOW_ISO = "2026-03-15T12:00:00Z"
FIXED_NOW_MS = parse_iso_ms(FIXED_NOW_ISO)

FREE_USER = UserContext(user_id="usr_free", email="free@example.com", tier="free")
PREMIUM_USER = UserContext(user_id="usr_premium", email="premium@example.com", tier="premium")
ENTERPRISE_USER = UserContext(user_id="usr_enterprise", email="enterprise@example.com", tier="enterprise")
OTHER_USER = UserContext(user_id="usr_other", email="other@example.com", tier="enterprise")

TOKENS = {
    "free-token": FREE_USER,
    "premium-token": PREMIUM_USER,
    "enterprise-token": ENTERPRISE_USER,
    "other-token": OTHER_USER,
}


class FakeAuthenticator:
    """Maps ``Bearer <token>`` headers to fixed users."""

    def __init__(self, tokens: Optional[Dict[str, UserContext]] = None) -> None:
        self.tokens = tokens if tokens is not None else dict(TOKENS)
        self.calls: List[Optional[str]] = []

    async def __call__(self, authorization: Optional[str]) -> Optional[UserContext]:
        self.calls.append(authorization)
        if not authorization or not authorization.startswith("Bearer "):
            return None
        return self.tokens.get(authorization[len("Bearer "):])


class FakeBinding:
    """Records calls and answers with a canned result or error."""

    def __init__(self, name: str, result: Any = None, error: Optional[Exception] = None) -> None:
        self.name = name
        self.result = {"ok": True} if result is None else result
        self.error = error
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def call(self, operation: str, payload: Dict[str, Any]) -> Any:
        self.calls.append((operation, payload))
        if self.error is not None:
            raise self.error
        return self.result

    async def aclose(self) -> None:
        return None


def rpc(method: str, params: Optional[Dict[str, Any]] = None, request_id: Any = 1) -> JsonRpcRequest:
    return JsonRpcRequest(method=method, id=request_id, params=params)


def tool_call(name: str, arguments: Optional[Dict[str, Any]] = None, request_id: Any = 1) -> JsonRpcRequest:
    params: Dict[str, Any] = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return rpc("tools/call", params, request_id)


def tool_result(payload: Dict[str, Any]) -> Any:
    """Decode the JSON text content of a successful ``tools/call`` payload."""

    assert "error" not in payload, payload
    content = payload["result"]["content"]
    assert content[0]["type"] == "text"
    return orjson.loads(content[0]["text"])


@pytest.fixture
async def database():
    db = SqliteDatabase()
    await db.connect()
    await db.migrate()
    yield db
    await db.close()


@pytest.fixture
async def accounts(database):
    """Two accounts for the premium user and one for somebody else."""

    repo = AccountRepository(database)
    seeded = [
        AccountRecord(
            account_id="acc_work",
            user_id=PREMIUM_USER.user_id,
            provider="google",
            email="work@example.com",
            status="active",
            channel_id="chan_work",
            channel_expiry_ts="2026-03-20T00:00:00Z",
            last_sync_ts="2026-03-15T11:30:00Z",
        ),
        AccountRecord(
            account_id="acc_personal",
            user_id=PREMIUM_USER.user_id,
            provider="microsoft",
            email="me@example.com",
            status="active",
            last_sync_ts="2026-03-15T02:00:00Z",
            error_count=2,
        ),
        AccountRecord(
            account_id="acc_foreign",
            user_id=OTHER_USER.user_id,
            provider="google",
            email="other@example.com",
            status="error",
        ),
    ]
    for account in seeded:
        await repo.add(account)
    return seeded


@pytest.fixture
def usergraph():
    return FakeBinding("usergraph", result={"constraint_id": "cst_1"})


@pytest.fixture
def commitments():
    return FakeBinding("commitments", result={"commitments": []})


@pytest.fixture
def bindings(usergraph, commitments):
    return ServiceBindings(usergraph=usergraph, commitments=commitments)


@pytest.fixture
def registry():
    return build_tool_registry()


@pytest.fixture
def dispatcher(registry):
    return McpDispatcher(registry, clock=lambda: FIXED_NOW_MS)


@pytest.fixture
def authenticator():
    return FakeAuthenticator()


@pytest.fixture
def server(dispatcher, authenticator, database, bindings):
    return McpServer(dispatcher, authenticator, database, bindings)


@pytest.fixture
def call(dispatcher, database, bindings):
    """Dispatch one ``tools/call`` and return the response payload."""

    async def _call(name: str, arguments: Optional[Dict[str, Any]] = None, user: UserContext = PREMIUM_USER):
        response = await dispatcher.dispatch(tool_call(name, arguments), user, database, bindings)
        return response.to_payload()

    return _call


@pytest.fixture
def unavailable_bindings():
    return ServiceBindings(
        usergraph=FakeBinding("usergraph", error=ServiceUnavailableError("usergraph")),
        commitments=FakeBinding("commitments", error=ServiceUnavailableError("commitments")),
    )

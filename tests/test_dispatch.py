"""
Tests for JSON-RPC envelope handling, authentication gating and tool dispatch.
"""

import orjson
import pytest
from conftest import FREE_USER, PREMIUM_USER, rpc, tool_call

from tminus_mcp.api.dispatch import InvalidRequestError, McpDispatcher, parse_jsonrpc_request
from tminus_mcp.api.registry import ToolRegistry, ToolSet
from tminus_mcp.api.validators import validate_no_params


class TestParseJsonRpcRequest:
    @pytest.mark.parametrize("body", [[], "tools/list", 3, None])
    def test_non_object_body(self, body):
        with pytest.raises(InvalidRequestError) as excinfo:
            parse_jsonrpc_request(body)
        assert excinfo.value.message == "Invalid Request"
        assert excinfo.value.request_id is None

    def test_wrong_version_keeps_id(self):
        with pytest.raises(InvalidRequestError) as excinfo:
            parse_jsonrpc_request({"jsonrpc": "1.0", "method": "tools/list", "id": "abc"})
        assert "jsonrpc" in excinfo.value.message
        assert excinfo.value.request_id == "abc"

    def test_method_must_be_string(self):
        with pytest.raises(InvalidRequestError, match="method"):
            parse_jsonrpc_request({"jsonrpc": "2.0", "method": 7, "id": 1})

    def test_missing_id_is_null(self):
        assert parse_jsonrpc_request({"jsonrpc": "2.0", "method": "tools/list"}).id is None


@pytest.mark.asyncio
class TestMcpServerHandle:
    async def test_parse_error(self, server):
        status, payload = await server.handle(b"{not json", "Bearer premium-token")

        assert status == 200
        assert payload == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}

    async def test_invalid_request_precedes_auth(self, server, authenticator):
        status, payload = await server.handle(b'{"jsonrpc": "2.0", "method": 1, "id": 9}', None)

        assert status == 200
        assert payload["error"]["code"] == -32600
        assert payload["id"] == 9
        assert authenticator.calls == []

    @pytest.mark.parametrize("authorization", [None, "", "Basic abc", "Bearer wrong"])
    async def test_auth_required(self, server, authorization):
        body = orjson.dumps({"jsonrpc": "2.0", "method": "tools/list", "id": 4})
        status, payload = await server.handle(body, authorization)

        assert status == 401
        assert payload["error"]["code"] == -32000
        assert "Authentication required" in payload["error"]["message"]
        assert payload["id"] == 4

    async def test_success_echoes_id(self, server):
        body = orjson.dumps({"jsonrpc": "2.0", "method": "tools/list", "id": "req-1"})
        status, payload = await server.handle(body, "Bearer free-token")

        assert status == 200
        assert payload["id"] == "req-1"
        assert "error" not in payload
        assert len(payload["result"]["tools"]) == 21

    async def test_null_id_is_echoed(self, server):
        body = orjson.dumps({"jsonrpc": "2.0", "method": "tools/list", "id": None})
        _, payload = await server.handle(body, "Bearer free-token")

        assert "id" in payload
        assert payload["id"] is None

    async def test_authenticator_crash_is_unauthenticated(self, dispatcher, database, bindings):
        from tminus_mcp.api.dispatch import McpServer

        async def broken(authorization):
            raise RuntimeError("boom")

        server = McpServer(dispatcher, broken, database, bindings)
        status, payload = await server.handle(b'{"jsonrpc": "2.0", "method": "tools/list", "id": 1}', "Bearer x")

        assert status == 401
        assert payload["error"]["code"] == -32000


@pytest.mark.asyncio
class TestDispatch:
    async def test_unknown_method(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(rpc("resources/list"), PREMIUM_USER, database, bindings)

        assert response.to_payload()["error"] == {"code": -32601, "message": "Method not found: resources/list"}

    async def test_tools_list_is_not_gated(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(rpc("tools/list"), FREE_USER, database, bindings)
        names = {tool["name"] for tool in response.result["tools"]}

        assert "calendar.get_drift_report" in names

    @pytest.mark.parametrize("params", [None, {}, {"name": 5}, ["calendar.list_accounts"]])
    async def test_tools_call_requires_name(self, dispatcher, database, bindings, params):
        response = await dispatcher.dispatch(rpc("tools/call", params), PREMIUM_USER, database, bindings)

        assert response.error.code == -32602
        assert "params.name" in response.error.message

    async def test_unknown_tool(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(tool_call("calendar.teleport"), PREMIUM_USER, database, bindings)

        assert response.error.code == -32601
        assert response.error.message == "Tool not found: calendar.teleport"

    async def test_tier_check_runs_before_validation(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(
            tool_call("calendar.create_event", {"title": ""}), FREE_USER, database, bindings
        )

        assert response.error.code == -32603
        assert response.error.data == {
            "code": "TIER_REQUIRED",
            "required_tier": "premium",
            "current_tier": "free",
            "tool": "calendar.create_event",
        }

    async def test_validation_error(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(
            tool_call("calendar.list_events", {"end": "2026-03-15T10:00:00Z"}), FREE_USER, database, bindings
        )

        assert response.error.code == -32602
        assert "'start' is required" in response.error.message

    async def test_arguments_must_be_object(self, dispatcher, database, bindings):
        response = await dispatcher.dispatch(
            tool_call("calendar.list_accounts", ["x"]), FREE_USER, database, bindings
        )

        assert response.error.code == -32602

    async def test_unexpected_handler_error_is_generic(self, database, bindings):
        tools = ToolSet("test")

        @tools.register("calendar.explode", description="always fails", validator=validate_no_params)
        async def explode(ctx, params):
            raise KeyError("secret internals")

        dispatcher = McpDispatcher(ToolRegistry(tools))
        response = await dispatcher.dispatch(tool_call("calendar.explode"), FREE_USER, database, bindings)

        assert response.error.code == -32603
        assert response.error.message == "Internal error"
        assert "secret" not in orjson.dumps(response.to_payload()).decode()

    async def test_injected_registry_and_clock(self, database, bindings):
        tools = ToolSet("test")
        seen = []

        @tools.register("calendar.clock", description="echo clock", validator=validate_no_params)
        async def clock(ctx, params):
            seen.append(ctx.now_ms)
            return {"now": ctx.now_ms}

        dispatcher = McpDispatcher(ToolRegistry(tools), clock=lambda: 1234)
        response = await dispatcher.dispatch(tool_call("calendar.clock"), FREE_USER, database, bindings)

        assert seen == [1234]
        assert response.result == {"content": [{"type": "text", "text": '{"now":1234}'}]}

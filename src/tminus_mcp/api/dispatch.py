"""JSON-RPC 2.0 dispatch for the MCP ``tools/list`` and ``tools/call`` methods.

:class:`McpDispatcher` turns one parsed request into one response envelope and
never raises. :class:`McpServer` adds the transport-facing steps in front of
it (body parsing, envelope validation, authentication) and reports the HTTP
status alongside the payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, Union

import orjson

from ..core.tiers import check_tier_access
from ..core.timeutil import current_time_ms
from ..domain import UserContext
from .errors import (
    RPC_AUTH_REQUIRED,
    RPC_INTERNAL_ERROR,
    RPC_INVALID_PARAMS,
    RPC_INVALID_REQUEST,
    RPC_METHOD_NOT_FOUND,
    RPC_PARSE_ERROR,
    InvalidParamsError,
    McpToolError,
)
from .models import JsonRpcResponse, RequestId
from .registry import ToolContext, ToolRegistry
from .serializers import text_content

if TYPE_CHECKING:
    from ..data.database import Database
    from ..services.auth import Authenticator
    from ..services.bindings import ServiceBindings

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"

AUTH_REQUIRED_MESSAGE = "Authentication required: provide a valid JWT in the Authorization header"

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401

Clock = Callable[[], int]


@dataclass(frozen=True, slots=True)
class JsonRpcRequest:
    method: str
    id: RequestId = None
    params: Optional[Any] = None
    jsonrpc: str = JSONRPC_VERSION


class InvalidRequestError(Exception):
    def __init__(self, message: str, request_id: RequestId = None) -> None:
        super().__init__(message)
        self.message = message
        self.request_id = request_id


def parse_jsonrpc_request(body: Any) -> JsonRpcRequest:
    """Validate the envelope shape of an already-decoded JSON body."""

    if not isinstance(body, dict):
        raise InvalidRequestError("Invalid Request")
    request_id = body.get("id")
    if body.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequestError('Invalid Request: jsonrpc must be "2.0"', request_id)
    method = body.get("method")
    if not isinstance(method, str):
        raise InvalidRequestError("Invalid Request: method must be a string", request_id)
    return JsonRpcRequest(method=method, id=request_id, params=body.get("params"))


class McpDispatcher:
    def __init__(self, registry: ToolRegistry, *, clock: Clock = current_time_ms) -> None:
        self.registry = registry
        self._clock = clock

    async def dispatch(
        self,
        request: JsonRpcRequest,
        user: UserContext,
        database: "Database",
        bindings: "ServiceBindings",
    ) -> JsonRpcResponse:
        try:
            if request.method == METHOD_TOOLS_LIST:
                return JsonRpcResponse.success(request.id, {"tools": self.registry.definitions()})
            if request.method == METHOD_TOOLS_CALL:
                return await self._call_tool(request, user, database, bindings)
            return JsonRpcResponse.failure(request.id, RPC_METHOD_NOT_FOUND, f"Method not found: {request.method}")
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected failure dispatching %s", request.method)
            return JsonRpcResponse.failure(request.id, RPC_INTERNAL_ERROR, "Internal error")

    async def _call_tool(
        self,
        request: JsonRpcRequest,
        user: UserContext,
        database: "Database",
        bindings: "ServiceBindings",
    ) -> JsonRpcResponse:
        params = request.params if isinstance(request.params, dict) else {}
        name = params.get("name")
        if not isinstance(name, str):
            return JsonRpcResponse.failure(
                request.id, RPC_INVALID_PARAMS, "Invalid params: tools/call requires params.name (string)"
            )

        tool = self.registry.get(name)
        if tool is None:
            return JsonRpcResponse.failure(request.id, RPC_METHOD_NOT_FOUND, f"Tool not found: {name}")

        access = check_tier_access(name, user.tier, self.registry.tier_map)
        if not access.allowed:
            logger.info("Tier denied: user %s (%s) calling %s", user.user_id, access.current_tier, name)
            return JsonRpcResponse.failure(
                request.id,
                RPC_INTERNAL_ERROR,
                f"Insufficient tier: {name} requires '{access.required_tier.value}' tier "
                f"(current: '{access.current_tier}')",
                access.to_error_data(),
            )

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return JsonRpcResponse.failure(
                request.id, RPC_INVALID_PARAMS, "Invalid params: arguments must be an object"
            )

        try:
            validated = tool.validator(arguments)
        except InvalidParamsError as exc:
            logger.info("Invalid arguments for %s: %s", name, exc)
            return JsonRpcResponse.failure(request.id, RPC_INVALID_PARAMS, str(exc))

        context = ToolContext(user=user, database=database, bindings=bindings, now_ms=self._clock())
        logger.debug("Calling tool %s for user %s", name, user.user_id)
        try:
            result = await tool.handler(context, validated)
        except McpToolError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return JsonRpcResponse.failure(request.id, exc.rpc_code, str(exc))
        except Exception:  # noqa: BLE001
            logger.exception("Tool %s raised an unexpected error", name)
            return JsonRpcResponse.failure(request.id, RPC_INTERNAL_ERROR, "Internal error")

        return JsonRpcResponse.success(request.id, text_content(result))


class McpServer:
    """Transport-agnostic front door: raw body in, ``(status, payload)`` out."""

    def __init__(
        self,
        dispatcher: McpDispatcher,
        authenticator: "Authenticator",
        database: "Database",
        bindings: "ServiceBindings",
    ) -> None:
        self.dispatcher = dispatcher
        self.authenticator = authenticator
        self.database = database
        self.bindings = bindings

    async def _authenticate(self, authorization: Optional[str]) -> Optional[UserContext]:
        try:
            return await self.authenticator(authorization)
        except Exception:  # noqa: BLE001
            logger.exception("Authenticator raised; treating request as unauthenticated")
            return None

    async def handle(self, raw_body: Union[bytes, str], authorization: Optional[str]) -> Tuple[int, Dict[str, Any]]:
        try:
            body = orjson.loads(raw_body)
        except orjson.JSONDecodeError:
            return HTTP_OK, JsonRpcResponse.failure(None, RPC_PARSE_ERROR, "Parse error").to_payload()

        try:
            request = parse_jsonrpc_request(body)
        except InvalidRequestError as exc:
            return HTTP_OK, JsonRpcResponse.failure(exc.request_id, RPC_INVALID_REQUEST, exc.message).to_payload()

        user = await self._authenticate(authorization)
        if user is None:
            return (
                HTTP_UNAUTHORIZED,
                JsonRpcResponse.failure(request.id, RPC_AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE).to_payload(),
            )

        response = await self.dispatcher.dispatch(request, user, self.database, self.bindings)
        return HTTP_OK, response.to_payload()


__all__ = [
    "AUTH_REQUIRED_MESSAGE",
    "InvalidRequestError",
    "JsonRpcRequest",
    "McpDispatcher",
    "McpServer",
    "parse_jsonrpc_request",
]

from __future__ import annotations

RPC_PARSE_ERROR = -32700
RPC_INVALID_REQUEST = -32600
RPC_METHOD_NOT_FOUND = -32601
RPC_INVALID_PARAMS = -32602
RPC_INTERNAL_ERROR = -32603
RPC_AUTH_REQUIRED = -32000


class McpToolError(Exception):
    """Base class for errors a tool handler is allowed to surface to the caller."""

    rpc_code = RPC_INTERNAL_ERROR


class InvalidParamsError(McpToolError, ValueError):
    """Raised by validators when caller-supplied arguments are unusable."""

    rpc_code = RPC_INVALID_PARAMS


class NotFoundError(McpToolError):
    """Raised when an account, event or policy does not exist for the caller."""

    rpc_code = RPC_INVALID_PARAMS


class ServiceUnavailableError(McpToolError):
    """Raised when a dependent service binding cannot serve the request."""

    rpc_code = RPC_INTERNAL_ERROR

    def __init__(self, binding: str) -> None:
        super().__init__(f"Service binding unavailable: {binding}")
        self.binding = binding


__all__ = [
    "InvalidParamsError",
    "McpToolError",
    "NotFoundError",
    "RPC_AUTH_REQUIRED",
    "RPC_INTERNAL_ERROR",
    "RPC_INVALID_PARAMS",
    "RPC_INVALID_REQUEST",
    "RPC_METHOD_NOT_FOUND",
    "RPC_PARSE_ERROR",
    "ServiceUnavailableError",
]

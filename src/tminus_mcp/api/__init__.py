"""JSON-RPC tool surface: validation, registry, dispatch and handlers."""

from __future__ import annotations

from .dispatch import JsonRpcRequest, McpDispatcher, McpServer, parse_jsonrpc_request
from .errors import InvalidParamsError, McpToolError, NotFoundError, ServiceUnavailableError
from .registry import McpTool, ToolContext, ToolRegistry, ToolSet
from .tools import build_tool_registry

__all__ = [
    "InvalidParamsError",
    "JsonRpcRequest",
    "McpDispatcher",
    "McpServer",
    "McpTool",
    "McpToolError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ToolContext",
    "ToolRegistry",
    "ToolSet",
    "build_tool_registry",
    "parse_jsonrpc_request",
]

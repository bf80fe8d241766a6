"""T-Minus MCP: calendar tools over JSON-RPC for AI agents."""

__version__ = "0.1.0"

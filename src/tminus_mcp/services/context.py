from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..api.dispatch import McpDispatcher, McpServer
from ..api.registry import ToolRegistry
from ..api.tools import build_tool_registry
from ..config import AppSettings, get_settings
from ..core.timeutil import current_time_ms
from ..data import Database, SqliteDatabase, SupabaseGateway
from .auth import Authenticator, SupabaseAuthenticator
from .bindings import ServiceBindings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class McpContext:
    """Aggregate root wiring settings, storage, auth and bindings into one server.

    Any collaborator left as ``None`` is built from ``settings``.
    """

    settings: AppSettings = field(default_factory=get_settings)
    database: Optional[Database] = None
    authenticator: Optional[Authenticator] = None
    bindings: Optional[ServiceBindings] = None
    registry: Optional[ToolRegistry] = None
    clock: Callable[[], int] = current_time_ms
    gateway: SupabaseGateway = field(init=False)
    server: McpServer = field(init=False)

    def __post_init__(self) -> None:
        self.gateway = SupabaseGateway(self.settings.supabase)
        if self.database is None:
            self.database = SqliteDatabase(str(self.settings.storage.database_path))
        if self.authenticator is None:
            self.authenticator = SupabaseAuthenticator(self.gateway)
        if self.bindings is None:
            self.bindings = ServiceBindings.from_settings(self.settings.bindings)
        if self.registry is None:
            self.registry = build_tool_registry()
        self.server = McpServer(
            dispatcher=McpDispatcher(self.registry, clock=self.clock),
            authenticator=self.authenticator,
            database=self.database,
            bindings=self.bindings,
        )

    async def startup(self) -> None:
        if isinstance(self.database, SqliteDatabase):
            await self.database.connect()
            await self.database.migrate()
        logger.info("MCP context ready with %d tools", len(self.registry))

    async def shutdown(self) -> None:
        await self.bindings.aclose()
        if isinstance(self.database, SqliteDatabase):
            await self.database.close()

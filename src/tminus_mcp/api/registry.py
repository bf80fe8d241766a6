from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
)

from ..core.tiers import TOOL_TIERS, required_tier_for
from ..data.repositories import AccountRepository, EventRepository, PolicyRepository
from ..domain import Tier, UserContext

if TYPE_CHECKING:
    from ..data.database import Database
    from ..services.bindings import ServiceBindings

JsonSchema = Dict[str, Any]
Validator = Callable[[Mapping[str, Any]], Any]
ToolHandler = Callable[["ToolContext", Any], Awaitable[Any]]


def object_schema(properties: Dict[str, JsonSchema], required: Sequence[str] = ()) -> JsonSchema:
    schema: JsonSchema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema


@dataclass(slots=True)
class ToolContext:
    """Everything a handler may touch while serving one call."""

    user: UserContext
    database: "Database"
    bindings: "ServiceBindings"
    now_ms: int
    accounts: AccountRepository = field(init=False)
    events: EventRepository = field(init=False)
    policies: PolicyRepository = field(init=False)

    def __post_init__(self) -> None:
        self.accounts = AccountRepository(self.database)
        self.events = EventRepository(self.database)
        self.policies = PolicyRepository(self.database)


@dataclass(frozen=True)
class McpTool:
    name: str
    description: str
    input_schema: JsonSchema
    validator: Validator
    handler: ToolHandler
    category: str

    def definition(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }


class ToolSet:
    """Collects the tools of one concern through the ``register`` decorator."""

    def __init__(self, category: str) -> None:
        self.category = category
        self._tools: Dict[str, McpTool] = {}

    def register(
        self,
        name: str,
        *,
        description: str,
        validator: Validator,
        input_schema: Optional[JsonSchema] = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            if name in self._tools:
                raise ValueError(f"Tool '{name}' is already registered.")
            self._tools[name] = McpTool(
                name=name,
                description=description,
                input_schema=input_schema or object_schema({}),
                validator=validator,
                handler=handler,
                category=self.category,
            )
            return handler

        return decorator

    def __iter__(self) -> Iterator[McpTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


class ToolRegistry:
    """Immutable name -> tool lookup paired with the tier map that gates it."""

    def __init__(self, tools: Iterable[McpTool], tier_map: Mapping[str, Tier] = TOOL_TIERS) -> None:
        collected: Dict[str, McpTool] = {}
        for tool in tools:
            if tool.name in collected:
                raise ValueError(f"Tool '{tool.name}' is already registered.")
            collected[tool.name] = tool
        self._tools: Mapping[str, McpTool] = MappingProxyType(collected)
        self.tier_map: Mapping[str, Tier] = MappingProxyType(dict(tier_map))

    def get(self, name: str) -> Optional[McpTool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def definitions(self) -> List[Dict[str, Any]]:
        return [tool.definition() for tool in self._tools.values()]

    def required_tier(self, name: str) -> Tier:
        return required_tier_for(name, self.tier_map)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[McpTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


__all__ = [
    "JsonSchema",
    "McpTool",
    "ToolContext",
    "ToolHandler",
    "ToolRegistry",
    "ToolSet",
    "Validator",
    "object_schema",
]

"""Tool catalogue.

A ``ToolDefinition`` couples a tool's public descriptor (name, description,
JSON Schema) with its handler and the declarative constraints the validator
enforces on top of the schema. The registry is filled once at startup and
not modified afterwards.
"""

import logging
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Tuple,
)

from clickup_mcp.core.errors import ToolDisabledError, UnknownToolError
from clickup_mcp.core.responses import ToolResponse

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any], "ClickUpServices"], Awaitable[ToolResponse]]


@dataclass(frozen=True)
class ResourceRef:
    """An "id or name" parameter pair.

    At least one of ``id_field`` / ``name_field`` must be supplied. When only
    the name is given and ``scope_fields`` is non-empty, one of the scope
    fields must be supplied as well (e.g. a folder name needs its space).
    """

    id_field: str
    name_field: Optional[str] = None
    scope_fields: Tuple[str, ...] = ()
    label: str = "resource"

    def describe(self) -> str:
        if self.name_field:
            return f"Either {self.id_field} or {self.name_field} is required"
        return f"{self.id_field} is required"


@dataclass(frozen=True)
class ToolDefinition:
    """A registered tool.

    Attributes:
        name: Unique tool name
        description: Human-readable description shown at discovery
        input_schema: JSON Schema (Draft 7) for the arguments object
        handler: Async callable ``(params, services) -> ToolResponse``
        identifier_groups: "id or name" constraints checked after the schema
        update_fields: When non-empty, at least one must be present
        batch_field: Array parameter whose items are validated one by one
            instead of failing the whole call
        item_identifier_groups: "id or name" constraints for each batch item
        item_update_fields: Like update_fields, for each batch item
    """

    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ToolHandler = field(compare=False)
    identifier_groups: Tuple[ResourceRef, ...] = ()
    update_fields: Tuple[str, ...] = ()
    batch_field: Optional[str] = None
    item_identifier_groups: Tuple[ResourceRef, ...] = ()
    item_update_fields: Tuple[str, ...] = ()

    def to_descriptor(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Name -> ToolDefinition mapping with a block-list of disabled names."""

    def __init__(self, disabled_tools: Iterable[str] = ()):
        self._tools: Dict[str, ToolDefinition] = {}
        self._disabled: FrozenSet[str] = frozenset(disabled_tools)

    def register(self, definition: ToolDefinition) -> None:
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = definition
        logger.debug(f"Registered tool: {definition.name}")

    def register_all(self, definitions: Iterable[ToolDefinition]) -> None:
        for definition in definitions:
            self.register(definition)

    def is_disabled(self, name: str) -> bool:
        return name in self._disabled

    def get(self, name: str) -> ToolDefinition:
        """Look up an enabled tool.

        The disabled check comes first, so a disabled name reports as
        disabled even when it is not registered.

        Raises:
            ToolDisabledError: ``name`` is on the disabled list
            UnknownToolError: No tool is registered under ``name``
        """
        if self.is_disabled(name):
            raise ToolDisabledError(name)
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def list_tools(self) -> List[ToolDefinition]:
        """Enabled tools in registration order."""
        return [t for name, t in self._tools.items() if name not in self._disabled]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

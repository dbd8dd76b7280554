"""Tool definitions, one module per ClickUp resource family."""

import logging
from typing import TYPE_CHECKING, Tuple

from clickup_mcp.core.registry import ToolDefinition, ToolRegistry
from clickup_mcp.tools import (
    bulk,
    document,
    folder,
    list as list_tools,
    member,
    space,
    tag,
    task,
    time_tracking,
    workspace,
)

if TYPE_CHECKING:
    from clickup_mcp.config import ServerConfig

logger = logging.getLogger(__name__)

CORE_TOOLS: Tuple[ToolDefinition, ...] = (
    *workspace.TOOLS,
    *task.TOOLS,
    *bulk.TOOLS,
    *time_tracking.TOOLS,
    *list_tools.TOOLS,
    *folder.TOOLS,
    *tag.TOOLS,
    *member.TOOLS,
    *space.TOOLS,
)
DOCUMENT_TOOLS: Tuple[ToolDefinition, ...] = document.TOOLS


def build_registry(config: "ServerConfig") -> ToolRegistry:
    """Register every tool family; document tools only with document support on."""
    registry = ToolRegistry(disabled_tools=config.disabled_tools)
    registry.register_all(CORE_TOOLS)
    if config.document_support:
        registry.register_all(DOCUMENT_TOOLS)

    unknown = sorted(name for name in config.disabled_tools if name not in registry)
    if unknown:
        logger.warning(f"Disabled tools not registered: {', '.join(unknown)}")
    logger.info(
        f"Registered {len(registry)} tools ({len(registry.list_tools())} enabled)"
    )
    return registry


__all__ = ["CORE_TOOLS", "DOCUMENT_TOOLS", "build_registry"]

"""Workspace hierarchy tool."""

from typing import TYPE_CHECKING, Any, Dict, List

from clickup_mcp.core.registry import ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import object_schema

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices


def format_tree(hierarchy: Dict[str, Any]) -> str:
    """Render the hierarchy as an indented outline with ids."""
    lines: List[str] = [f"Workspace (ID: {hierarchy['id']})"]
    for space in hierarchy["spaces"]:
        lines.append(f"  Space: {space['name']} (ID: {space['id']})")
        for folder in space["folders"]:
            lines.append(f"    Folder: {folder['name']} (ID: {folder['id']})")
            for lst in folder["lists"]:
                lines.append(f"      List: {lst['name']} (ID: {lst['id']})")
        for lst in space["lists"]:
            lines.append(f"    List: {lst['name']} (ID: {lst['id']})")
    return "\n".join(lines)


async def handle_get_workspace_hierarchy(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    hierarchy = await services.workspace.get_hierarchy()
    return success_response(
        message=f"Workspace has {len(hierarchy['spaces'])} spaces",
        hierarchy=hierarchy,
        tree=format_tree(hierarchy),
    )


TOOLS = (
    ToolDefinition(
        name="get_workspace_hierarchy",
        description=(
            "Get the complete workspace hierarchy: spaces, the folders in each space, "
            "and the lists in each folder or directly in a space. Use it to find ids "
            "before calling other tools."
        ),
        input_schema=object_schema({}),
        handler=handle_get_workspace_hierarchy,
    ),
)

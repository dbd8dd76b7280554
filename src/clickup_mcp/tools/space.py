"""Space management tools."""

import logging
from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import (
    bool_prop,
    copy_present,
    object_schema,
    resolve_space_id,
    string_prop,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

logger = logging.getLogger(__name__)


def _toggle(*extra_flags: str) -> Dict[str, Any]:
    properties = {"enabled": {"type": "boolean"}}
    for flag in extra_flags:
        properties[flag] = {"type": "boolean"}
    return {"type": "object", "properties": properties}


FEATURES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "description": "Feature toggles for the space",
    "properties": {
        "due_dates": _toggle("start_date", "remap_due_dates", "remap_closed_due_date"),
        "time_tracking": _toggle(),
        "tags": _toggle(),
        "time_estimates": _toggle(),
        "checklists": _toggle(),
        "custom_fields": _toggle(),
        "remap_dependencies": _toggle(),
        "dependency_warning": _toggle(),
        "portfolios": _toggle(),
    },
}

SPACE_REF = ResourceRef("space_id", "space_name", label="space")

_SPACE_FIELDS = (
    ("name", "name"),
    ("multiple_assignees", "multiple_assignees"),
    ("features", "features"),
)


async def handle_create_space(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = copy_present(params, _SPACE_FIELDS)
    logger.info(f"Creating space: {params['name']}")
    space = await services.workspace.create_space(payload)
    return success_response(
        message=f"Successfully created space: {space.get('name')} (ID: {space.get('id')})",
        space=space,
    )


async def handle_update_space(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = copy_present(params, _SPACE_FIELDS)
    space_id = await resolve_space_id(
        params, services, id_field="space_id", name_field="space_name"
    )
    space = await services.workspace.update_space(space_id, payload)
    return success_response(
        message=f"Successfully updated space: {space.get('name')} (ID: {space.get('id')})",
        space=space,
    )


async def handle_delete_space(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    space_id = await resolve_space_id(
        params, services, id_field="space_id", name_field="space_name"
    )
    await services.workspace.delete_space(space_id)
    return success_response(message=f"Successfully deleted space: {space_id}", space_id=space_id)


TOOLS = (
    ToolDefinition(
        name="create_space",
        description="Create a new space in the ClickUp workspace",
        input_schema=object_schema(
            {
                "name": string_prop("Name of the space to create"),
                "multiple_assignees": bool_prop(
                    "Allow multiple assignees on tasks within this space"
                ),
                "features": FEATURES_SCHEMA,
            },
            required=["name"],
        ),
        handler=handle_create_space,
    ),
    ToolDefinition(
        name="update_space",
        description=(
            "Update an existing space. Identify it by space_id or by space_name; "
            "the id is used when both are given."
        ),
        input_schema=object_schema(
            {
                "space_id": string_prop("ID of the space to update"),
                "space_name": string_prop("Name of the space to update (alternative to space_id)"),
                "name": string_prop("New name for the space"),
                "multiple_assignees": bool_prop(
                    "Allow multiple assignees on tasks within this space"
                ),
                "features": FEATURES_SCHEMA,
            }
        ),
        handler=handle_update_space,
        identifier_groups=(SPACE_REF,),
        update_fields=("name", "multiple_assignees", "features"),
    ),
    ToolDefinition(
        name="delete_space",
        description="Delete a space from the ClickUp workspace",
        input_schema=object_schema(
            {
                "space_id": string_prop("ID of the space to delete"),
                "space_name": string_prop("Name of the space to delete (alternative to space_id)"),
            }
        ),
        handler=handle_delete_space,
        identifier_groups=(SPACE_REF,),
    ),
)

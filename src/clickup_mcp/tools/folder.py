"""Folder management tools.

A folder name is only unique within its space, so folder lookups by name
need ``spaceId`` or ``spaceName`` as well.
"""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import (
    bool_prop,
    copy_present,
    object_schema,
    resolve_folder_id,
    resolve_space_id,
    string_prop,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

SPACE_REF = ResourceRef("spaceId", "spaceName", label="space")
FOLDER_REF = ResourceRef(
    "folderId", "folderName", scope_fields=("spaceId", "spaceName"), label="folder"
)

_SPACE_PROPS = {
    "spaceId": string_prop("ID of the space containing the folder"),
    "spaceName": string_prop("Name of the space containing the folder"),
}
_FOLDER_REF_PROPS = {
    "folderId": string_prop("ID of the folder. Preferred over folderName when both are given"),
    "folderName": string_prop("Name of the folder; needs spaceId or spaceName"),
    **_SPACE_PROPS,
}
_FOLDER_FIELDS = (("name", "name"), ("override_statuses", "override_statuses"))


async def handle_create_folder(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = copy_present(params, _FOLDER_FIELDS)
    space_id = await resolve_space_id(params, services)
    folder = await services.folders.create_folder(space_id, payload)
    return success_response(
        message=f"Successfully created folder: {folder.get('name')} (ID: {folder.get('id')})",
        folder=folder,
    )


async def handle_get_folder(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    folder_id = await resolve_folder_id(params, services)
    folder = await services.folders.get_folder(folder_id)
    return success_response(
        message=f"Folder: {folder.get('name')} (ID: {folder.get('id')})",
        folder=folder,
    )


async def handle_update_folder(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = copy_present(params, _FOLDER_FIELDS)
    folder_id = await resolve_folder_id(params, services)
    folder = await services.folders.update_folder(folder_id, payload)
    return success_response(
        message=f"Successfully updated folder: {folder.get('name')} (ID: {folder.get('id')})",
        folder=folder,
    )


async def handle_delete_folder(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    folder_id = await resolve_folder_id(params, services)
    await services.folders.delete_folder(folder_id)
    return success_response(
        message=f"Successfully deleted folder: {folder_id}", folder_id=folder_id
    )


TOOLS = (
    ToolDefinition(
        name="create_folder",
        description="Create a folder in a space. Identify the space by spaceId or spaceName.",
        input_schema=object_schema(
            {
                "name": string_prop("Name of the folder"),
                **_SPACE_PROPS,
                "override_statuses": bool_prop(
                    "Use folder-specific statuses instead of the space statuses"
                ),
            },
            required=["name"],
        ),
        handler=handle_create_folder,
        identifier_groups=(SPACE_REF,),
    ),
    ToolDefinition(
        name="get_folder",
        description="Get a folder by folderId, or by folderName within a space.",
        input_schema=object_schema(dict(_FOLDER_REF_PROPS)),
        handler=handle_get_folder,
        identifier_groups=(FOLDER_REF,),
    ),
    ToolDefinition(
        name="update_folder",
        description="Update a folder's name or status settings.",
        input_schema=object_schema(
            {
                **_FOLDER_REF_PROPS,
                "name": string_prop("New name for the folder"),
                "override_statuses": bool_prop(
                    "Use folder-specific statuses instead of the space statuses"
                ),
            }
        ),
        handler=handle_update_folder,
        identifier_groups=(FOLDER_REF,),
        update_fields=("name", "override_statuses"),
    ),
    ToolDefinition(
        name="delete_folder",
        description="Delete a folder and everything in it. This cannot be undone.",
        input_schema=object_schema(dict(_FOLDER_REF_PROPS)),
        handler=handle_delete_folder,
        identifier_groups=(FOLDER_REF,),
    ),
)

"""List management tools."""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import (
    PRIORITY_PROP,
    copy_present,
    date_prop,
    object_schema,
    resolve_folder_id,
    resolve_list_id,
    resolve_space_id,
    string_prop,
    to_timestamp_ms,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

SPACE_REF = ResourceRef("spaceId", "spaceName", label="space")
FOLDER_REF = ResourceRef(
    "folderId", "folderName", scope_fields=("spaceId", "spaceName"), label="folder"
)
LIST_REF = ResourceRef("listId", "listName", label="list")

_LIST_REF_PROPS = {
    "listId": string_prop("ID of the list. Preferred over listName when both are given"),
    "listName": string_prop("Name of the list (alternative to listId)"),
}
_LIST_BODY_PROPS = {
    "content": string_prop("Description of the list"),
    "dueDate": date_prop("Due date for the list"),
    "priority": PRIORITY_PROP,
    "assignee": {"type": "integer", "description": "User id to assign the list to"},
    "status": string_prop("Status (color) of the list"),
}


def _list_payload(params: Dict[str, Any]) -> Dict[str, Any]:
    payload = copy_present(
        params,
        (
            ("name", "name"),
            ("content", "content"),
            ("priority", "priority"),
            ("assignee", "assignee"),
            ("status", "status"),
        ),
    )
    if params.get("dueDate") is not None:
        payload["due_date"] = to_timestamp_ms(params["dueDate"], "dueDate")
    return payload


def _list_message(verb: str, lst: Dict[str, Any]) -> str:
    return f"Successfully {verb} list: {lst.get('name')} (ID: {lst.get('id')})"


async def handle_create_list(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = _list_payload(params)
    space_id = await resolve_space_id(params, services)
    lst = await services.lists.create_list(space_id, payload)
    return success_response(message=_list_message("created", lst), list=lst)


async def handle_create_list_in_folder(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    payload = _list_payload(params)
    folder_id = await resolve_folder_id(params, services)
    lst = await services.lists.create_list_in_folder(folder_id, payload)
    return success_response(message=_list_message("created", lst), list=lst)


async def handle_get_list(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    list_id = await resolve_list_id(params, services)
    lst = await services.lists.get_list(list_id)
    return success_response(message=f"List: {lst.get('name')} (ID: {lst.get('id')})", list=lst)


async def handle_update_list(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = _list_payload(params)
    list_id = await resolve_list_id(params, services)
    lst = await services.lists.update_list(list_id, payload)
    return success_response(message=_list_message("updated", lst), list=lst)


async def handle_delete_list(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    list_id = await resolve_list_id(params, services)
    await services.lists.delete_list(list_id)
    return success_response(message=f"Successfully deleted list: {list_id}", list_id=list_id)


TOOLS = (
    ToolDefinition(
        name="create_list",
        description="Create a list directly in a space. Identify the space by spaceId or spaceName.",
        input_schema=object_schema(
            {
                "name": string_prop("Name of the list"),
                "spaceId": string_prop("ID of the space"),
                "spaceName": string_prop("Name of the space (alternative to spaceId)"),
                **_LIST_BODY_PROPS,
            },
            required=["name"],
        ),
        handler=handle_create_list,
        identifier_groups=(SPACE_REF,),
    ),
    ToolDefinition(
        name="create_list_in_folder",
        description=(
            "Create a list inside a folder. Identify the folder by folderId, or by "
            "folderName together with spaceId or spaceName."
        ),
        input_schema=object_schema(
            {
                "name": string_prop("Name of the list"),
                "folderId": string_prop("ID of the folder"),
                "folderName": string_prop("Name of the folder; needs spaceId or spaceName"),
                "spaceId": string_prop("ID of the space containing the folder"),
                "spaceName": string_prop("Name of the space containing the folder"),
                "content": string_prop("Description of the list"),
                "status": string_prop("Status (color) of the list"),
            },
            required=["name"],
        ),
        handler=handle_create_list_in_folder,
        identifier_groups=(FOLDER_REF,),
    ),
    ToolDefinition(
        name="get_list",
        description="Get a list by listId or listName.",
        input_schema=object_schema(dict(_LIST_REF_PROPS)),
        handler=handle_get_list,
        identifier_groups=(LIST_REF,),
    ),
    ToolDefinition(
        name="update_list",
        description="Update a list. Only the fields supplied are changed.",
        input_schema=object_schema(
            {
                **_LIST_REF_PROPS,
                "name": string_prop("New name for the list"),
                "content": string_prop("New description for the list"),
                "status": string_prop("New status (color) for the list"),
            }
        ),
        handler=handle_update_list,
        identifier_groups=(LIST_REF,),
        update_fields=("name", "content", "status"),
    ),
    ToolDefinition(
        name="delete_list",
        description="Delete a list and its tasks. This cannot be undone.",
        input_schema=object_schema(dict(_LIST_REF_PROPS)),
        handler=handle_delete_list,
        identifier_groups=(LIST_REF,),
    ),
)

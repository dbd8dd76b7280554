"""Tag tools."""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import object_schema, resolve_space_id, resolve_task_id, string_prop

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

SPACE_REF = ResourceRef("spaceId", "spaceName", label="space")
TASK_REF = ResourceRef("taskId", "taskName", label="task")

_TASK_TAG_PROPS = {
    "taskId": string_prop("ID of the task (regular or custom id such as 'DEV-1234')"),
    "taskName": string_prop("Name of the task (alternative to taskId)"),
    "listName": string_prop("Name of the list containing the task, to narrow a taskName lookup"),
    "tagName": string_prop("Name of the tag; it must already exist in the task's space"),
}


async def handle_get_space_tags(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    space_id = await resolve_space_id(params, services)
    tags = await services.tags.get_space_tags(space_id)
    return success_response(
        message=f"Found {len(tags)} tags in space {space_id}",
        space_id=space_id,
        tags=tags,
    )


async def handle_add_tag_to_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    await services.tags.add_tag_to_task(task_id, params["tagName"])
    return success_response(
        message=f"Successfully added tag '{params['tagName']}' to task {task_id}",
        task_id=task_id,
        tag_name=params["tagName"],
    )


async def handle_remove_tag_from_task(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    await services.tags.remove_tag_from_task(task_id, params["tagName"])
    return success_response(
        message=f"Successfully removed tag '{params['tagName']}' from task {task_id}",
        task_id=task_id,
        tag_name=params["tagName"],
    )


TOOLS = (
    ToolDefinition(
        name="get_space_tags",
        description="Get all tags defined in a space.",
        input_schema=object_schema(
            {
                "spaceId": string_prop("ID of the space"),
                "spaceName": string_prop("Name of the space (alternative to spaceId)"),
            }
        ),
        handler=handle_get_space_tags,
        identifier_groups=(SPACE_REF,),
    ),
    ToolDefinition(
        name="add_tag_to_task",
        description="Add an existing space tag to a task.",
        input_schema=object_schema(dict(_TASK_TAG_PROPS), required=["tagName"]),
        handler=handle_add_tag_to_task,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="remove_tag_from_task",
        description="Remove a tag from a task. The tag itself is not deleted from the space.",
        input_schema=object_schema(dict(_TASK_TAG_PROPS), required=["tagName"]),
        handler=handle_remove_tag_from_task,
        identifier_groups=(TASK_REF,),
    ),
)

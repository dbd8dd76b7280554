"""Task tools: CRUD, move/duplicate, comments, attachments and workspace search."""

import base64
import binascii
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from clickup_mcp.core.errors import InvalidParamsError
from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.core.validation import is_present
from clickup_mcp.tools.common import (
    ASSIGNEES_PROP,
    PRIORITY_PROP,
    bool_prop,
    copy_present,
    date_prop,
    object_schema,
    resolve_list_id,
    resolve_task_id,
    string_prop,
    to_duration_ms,
    to_timestamp_ms,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

logger = logging.getLogger(__name__)

TASK_REF = ResourceRef("taskId", "taskName", label="task")
LIST_REF = ResourceRef("listId", "listName", label="list")
TARGET_LIST_REF = ResourceRef("targetListId", "targetListName", label="target list")

TASK_REF_PROPS: Dict[str, Any] = {
    "taskId": string_prop(
        "ID of the task. Regular ids and custom ids (e.g. 'DEV-1234') are both accepted. "
        "Preferred over taskName when both are given"
    ),
    "taskName": string_prop("Name of the task (alternative to taskId)"),
    "listName": string_prop("Name of the list containing the task, to narrow a taskName lookup"),
}

TARGET_LIST_PROPS: Dict[str, Any] = {
    "targetListId": string_prop("ID of the destination list"),
    "targetListName": string_prop("Name of the destination list (alternative to targetListId)"),
}

CUSTOM_FIELDS_PROP = {
    "type": "array",
    "description": "Custom field values",
    "items": {
        "type": "object",
        "properties": {"id": {"type": "string"}, "value": {}},
        "required": ["id", "value"],
    },
}

# Properties of a task body, shared by create_task and create_bulk_tasks items.
TASK_BODY_PROPS: Dict[str, Any] = {
    "description": string_prop("Plain text description"),
    "markdown_description": string_prop("Markdown description; takes precedence over description"),
    "status": string_prop("Status name; defaults to the list's first status"),
    "priority": PRIORITY_PROP,
    "dueDate": date_prop("Due date"),
    "startDate": date_prop("Start date"),
    "timeEstimate": {
        "type": ["string", "integer"],
        "description": "Time estimate in milliseconds or as a string like '1h 30m'",
    },
    "assignees": ASSIGNEES_PROP,
    "tags": {"type": "array", "items": {"type": "string"}, "description": "Tag names"},
    "parent": string_prop("ID of the parent task, to create a subtask"),
    "custom_fields": CUSTOM_FIELDS_PROP,
}

# Fields update_task may change. Nullable ones accept null to clear the value.
TASK_UPDATE_PROPS: Dict[str, Any] = {
    "name": string_prop("New task name"),
    "description": string_prop("New plain text description"),
    "markdown_description": string_prop("New markdown description"),
    "status": string_prop("New status name"),
    "priority": {**PRIORITY_PROP, "type": ["integer", "null"], "enum": [1, 2, 3, 4, None]},
    "dueDate": {**date_prop("New due date"), "type": ["string", "integer", "null"]},
    "startDate": {**date_prop("New start date"), "type": ["string", "integer", "null"]},
    "timeEstimate": TASK_BODY_PROPS["timeEstimate"],
}
TASK_UPDATE_FIELDS = tuple(TASK_UPDATE_PROPS)

_PLAIN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "name"),
    ("description", "description"),
    ("markdown_description", "markdown_description"),
    ("status", "status"),
    ("tags", "tags"),
    ("parent", "parent"),
    ("custom_fields", "custom_fields"),
)


def _convert_dates(params: Dict[str, Any], payload: Dict[str, Any], *, keep_null: bool) -> None:
    for param_name, api_name in (("dueDate", "due_date"), ("startDate", "start_date")):
        if param_name not in params:
            continue
        value = params[param_name]
        if value is None:
            if keep_null:
                payload[api_name] = None
            continue
        payload[api_name] = to_timestamp_ms(value, param_name)
    if params.get("timeEstimate") is not None:
        payload["time_estimate"] = to_duration_ms(params["timeEstimate"], "timeEstimate")


async def build_task_payload(
    params: Dict[str, Any], services: "ClickUpServices"
) -> Dict[str, Any]:
    """Create payload for one task.

    Local conversions run before any lookup so bad values fail without
    backend I/O. Assignee names are resolved last.
    """
    payload = copy_present(params, _PLAIN_FIELDS)
    if params.get("priority") is not None:
        payload["priority"] = params["priority"]
    _convert_dates(params, payload, keep_null=False)
    if params.get("assignees"):
        payload["assignees"] = await services.members.resolve_assignees(params["assignees"])
    return payload


def build_task_update(params: Dict[str, Any]) -> Dict[str, Any]:
    """Update payload with only the supplied fields; explicit nulls are kept."""
    payload = copy_present(params, _PLAIN_FIELDS[:4])
    if "priority" in params:
        payload["priority"] = params["priority"]
    _convert_dates(params, payload, keep_null=True)
    return payload


def task_summary(task: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": task.get("id"),
        "name": task.get("name"),
        "url": task.get("url"),
        "status": (task.get("status") or {}).get("status"),
        "list": task.get("list"),
    }


async def handle_create_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = await build_task_payload(params, services)
    list_id = await resolve_list_id(params, services)
    task = await services.tasks.create_task(list_id, payload)
    return success_response(
        message=f"Successfully created task: {task.get('name')} (ID: {task.get('id')})",
        task=task,
    )


async def handle_get_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    task = await services.tasks.get_task(task_id, subtasks=params.get("subtasks"))
    return success_response(
        message=f"Task: {task.get('name')} (ID: {task.get('id')})",
        task=task,
    )


async def handle_update_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    payload = build_task_update(params)
    task_id = await resolve_task_id(params, services)
    task = await services.tasks.update_task(task_id, payload)
    return success_response(
        message=f"Successfully updated task: {task.get('name')} (ID: {task.get('id')})",
        task=task,
    )


async def handle_move_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    list_id = await resolve_list_id(
        params, services, id_field="targetListId", name_field="targetListName"
    )
    task = await services.tasks.move_task(task_id, list_id)
    return success_response(
        message=f"Successfully moved task {task_id} to list {list_id} (new ID: {task.get('id')})",
        task=task,
        previous_task_id=task_id,
    )


async def handle_duplicate_task(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    list_id = None
    if is_present(params, "targetListId") or is_present(params, "targetListName"):
        list_id = await resolve_list_id(
            params, services, id_field="targetListId", name_field="targetListName"
        )
    task = await services.tasks.duplicate_task(
        task_id, list_id=list_id, name=params.get("newName")
    )
    return success_response(
        message=f"Successfully duplicated task {task_id} as {task.get('name')} (ID: {task.get('id')})",
        task=task,
        source_task_id=task_id,
    )


async def handle_delete_task(params: Dict[str, Any], services: "ClickUpServices") -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    await services.tasks.delete_task(task_id)
    return success_response(message=f"Successfully deleted task: {task_id}", task_id=task_id)


async def handle_get_task_comments(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    start = None
    if params.get("start") is not None:
        start = to_timestamp_ms(params["start"], "start")
    task_id = await resolve_task_id(params, services)
    comments = await services.tasks.get_comments(
        task_id, start=start, start_id=params.get("startId")
    )
    return success_response(
        message=f"Found {len(comments)} comments on task {task_id}",
        task_id=task_id,
        comments=comments,
    )


async def handle_create_task_comment(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    payload: Dict[str, Any] = {"comment_text": params["commentText"]}
    copy_present(params, (("notifyAll", "notify_all"), ("assignee", "assignee")), payload)
    task_id = await resolve_task_id(params, services)
    comment = await services.tasks.create_comment(task_id, payload)
    return success_response(
        message=f"Successfully added comment to task {task_id}",
        task_id=task_id,
        comment=comment,
    )


def _decode_file_data(params: Dict[str, Any]) -> bytes:
    if not is_present(params, "file_name"):
        raise InvalidParamsError("file_name is required when file_data is given")
    data = params["file_data"]
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidParamsError("file_data is not valid base64") from None


async def handle_attach_task_file(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    content = None
    if is_present(params, "file_data"):
        content = _decode_file_data(params)
    task_id = await resolve_task_id(params, services)
    if content is not None:
        filename = params["file_name"]
    else:
        content, filename = await services.client.download(params["file_url"])
        filename = params.get("file_name") or filename
    attachment = await services.tasks.attach_file(task_id, filename, content)
    return success_response(
        message=f"Successfully attached {filename} to task {task_id}",
        task_id=task_id,
        attachment=attachment,
    )


_FILTER_ARRAYS = (
    ("listIds", "list_ids[]"),
    ("spaceIds", "space_ids[]"),
    ("statuses", "statuses[]"),
    ("tags", "tags[]"),
)
_FILTER_DATES = (
    ("dueDateGreaterThan", "due_date_gt"),
    ("dueDateLessThan", "due_date_lt"),
    ("createdDateGreaterThan", "date_created_gt"),
    ("createdDateLessThan", "date_created_lt"),
    ("updatedDateGreaterThan", "date_updated_gt"),
    ("updatedDateLessThan", "date_updated_lt"),
)
_FILTER_FLAGS = (
    ("includeSubtasks", "subtasks"),
    ("includeClosed", "include_closed"),
    ("reverse", "reverse"),
)


async def build_task_query(
    params: Dict[str, Any], services: "ClickUpServices"
) -> List[Tuple[str, Any]]:
    """Translate filter parameters into ClickUp query pairs.

    Only supplied filters are sent; array filters repeat their key.
    """
    query: List[Tuple[str, Any]] = []
    for param_name, api_name in _FILTER_DATES:
        if params.get(param_name) is not None:
            query.append((api_name, to_timestamp_ms(params[param_name], param_name)))
    for param_name, api_name in _FILTER_ARRAYS:
        for value in params.get(param_name) or ():
            query.append((api_name, value))
    for param_name, api_name in _FILTER_FLAGS:
        if params.get(param_name) is not None:
            query.append((api_name, str(params[param_name]).lower()))
    if params.get("orderBy") is not None:
        query.append(("order_by", params["orderBy"]))
    if params.get("page") is not None:
        query.append(("page", params["page"]))
    if params.get("assignees"):
        for user_id in await services.members.resolve_assignees(params["assignees"]):
            query.append(("assignees[]", user_id))
    return query


async def handle_get_workspace_tasks(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    query = await build_task_query(params, services)
    data = await services.tasks.get_workspace_tasks(query)
    tasks = data.get("tasks", [])
    if params.get("detailLevel") == "summary":
        tasks = [task_summary(t) for t in tasks]
    return success_response(
        message=f"Found {len(tasks)} tasks",
        tasks=tasks,
        count=len(tasks),
        page=params.get("page", 0),
        last_page=data.get("last_page"),
    )


TOOLS = (
    ToolDefinition(
        name="create_task",
        description=(
            "Create a task in a list. Identify the list by listId or listName. "
            "Dates accept Unix milliseconds or ISO-8601; assignees accept user ids, "
            "emails or usernames."
        ),
        input_schema=object_schema(
            {
                "name": string_prop("Name of the task"),
                "listId": string_prop("ID of the list. Preferred over listName when both are given"),
                "listName": string_prop("Name of the list (alternative to listId)"),
                **TASK_BODY_PROPS,
            },
            required=["name"],
        ),
        handler=handle_create_task,
        identifier_groups=(LIST_REF,),
    ),
    ToolDefinition(
        name="get_task",
        description="Get a task by taskId, or by taskName (optionally narrowed by listName).",
        input_schema=object_schema(
            {**TASK_REF_PROPS, "subtasks": bool_prop("Include subtasks in the response")}
        ),
        handler=handle_get_task,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="update_task",
        description=(
            "Update a task. Only the fields supplied are changed; pass null for "
            "priority, dueDate or startDate to clear them."
        ),
        input_schema=object_schema({**TASK_REF_PROPS, **TASK_UPDATE_PROPS}),
        handler=handle_update_task,
        identifier_groups=(TASK_REF,),
        update_fields=TASK_UPDATE_FIELDS,
    ),
    ToolDefinition(
        name="move_task",
        description=(
            "Move a task to another list. The task is recreated in the destination "
            "list and the original is deleted, so the moved task gets a new id."
        ),
        input_schema=object_schema({**TASK_REF_PROPS, **TARGET_LIST_PROPS}),
        handler=handle_move_task,
        identifier_groups=(TASK_REF, TARGET_LIST_REF),
    ),
    ToolDefinition(
        name="duplicate_task",
        description="Copy a task, into the same list or into targetListId/targetListName.",
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                **TARGET_LIST_PROPS,
                "newName": string_prop("Name for the copy; defaults to the original name"),
            }
        ),
        handler=handle_duplicate_task,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="delete_task",
        description="Permanently delete a task. This cannot be undone.",
        input_schema=object_schema(dict(TASK_REF_PROPS)),
        handler=handle_delete_task,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="get_task_comments",
        description="Get comments on a task, newest first. Use start/startId to page back.",
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                "start": date_prop("Return comments older than this time"),
                "startId": string_prop("Comment id to start paging from"),
            }
        ),
        handler=handle_get_task_comments,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="create_task_comment",
        description="Add a comment to a task.",
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                "commentText": string_prop("Text of the comment"),
                "notifyAll": bool_prop("Notify everyone on the task, including the creator"),
                "assignee": {"type": "integer", "description": "User id to assign the comment to"},
            },
            required=["commentText"],
        ),
        handler=handle_create_task_comment,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="attach_task_file",
        description=(
            "Attach a file to a task, from base64 file_data (with file_name) or "
            "downloaded from file_url."
        ),
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                "file_data": string_prop("Base64-encoded file content (a data: URL is accepted)"),
                "file_name": string_prop("File name; required with file_data"),
                "file_url": string_prop("URL to download the file from"),
            }
        ),
        handler=handle_attach_task_file,
        identifier_groups=(TASK_REF, ResourceRef("file_data", "file_url", label="file")),
    ),
    ToolDefinition(
        name="get_workspace_tasks",
        description=(
            "Search tasks across the workspace. Every filter is passed to ClickUp; "
            "results come back in ClickUp's order, 100 per page."
        ),
        input_schema=object_schema(
            {
                "listIds": {"type": "array", "items": {"type": "string"}},
                "spaceIds": {"type": "array", "items": {"type": "string"}},
                "statuses": {"type": "array", "items": {"type": "string"}},
                "assignees": ASSIGNEES_PROP,
                "tags": {"type": "array", "items": {"type": "string"}},
                "dueDateGreaterThan": date_prop("Due after"),
                "dueDateLessThan": date_prop("Due before"),
                "createdDateGreaterThan": date_prop("Created after"),
                "createdDateLessThan": date_prop("Created before"),
                "updatedDateGreaterThan": date_prop("Updated after"),
                "updatedDateLessThan": date_prop("Updated before"),
                "includeSubtasks": bool_prop("Include subtasks"),
                "includeClosed": bool_prop("Include closed tasks"),
                "orderBy": {
                    "type": "string",
                    "enum": ["id", "created", "updated", "due_date"],
                    "description": "Sort field",
                },
                "reverse": bool_prop("Reverse the sort order"),
                "page": {"type": "integer", "minimum": 0, "description": "Page number, from 0"},
                "detailLevel": {
                    "type": "string",
                    "enum": ["summary", "detailed"],
                    "description": "'summary' returns id, name, url, status and list only",
                },
            }
        ),
        handler=handle_get_workspace_tasks,
    ),
)

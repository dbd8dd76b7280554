"""Time tracking tools."""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import (
    bool_prop,
    copy_present,
    date_prop,
    object_schema,
    resolve_task_id,
    string_prop,
    to_duration_ms,
    to_timestamp_ms,
)
from clickup_mcp.tools.task import TASK_REF_PROPS

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

TASK_REF = ResourceRef("taskId", "taskName", label="task")

_ENTRY_FIELDS = (
    ("description", "description"),
    ("billable", "billable"),
    ("tags", "tags"),
)
_ENTRY_PROPS = {
    "description": string_prop("Description of the time entry"),
    "billable": bool_prop("Whether the time is billable"),
    "tags": {
        "type": "array",
        "items": {"type": "object", "properties": {"name": {"type": "string"}}},
        "description": "Time entry tags, e.g. [{\"name\": \"meeting\"}]",
    },
}


def _format_duration(ms: int) -> str:
    minutes, _ = divmod(int(ms) // 1000, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m" if hours else f"{minutes}m"


async def handle_get_task_time_entries(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    start_date = end_date = None
    if params.get("startDate") is not None:
        start_date = to_timestamp_ms(params["startDate"], "startDate")
    if params.get("endDate") is not None:
        end_date = to_timestamp_ms(params["endDate"], "endDate")
    task_id = await resolve_task_id(params, services)
    entries = await services.time_tracking.get_task_time_entries(
        task_id, start_date=start_date, end_date=end_date, assignee=params.get("assignee")
    )
    total = sum(int(e.get("duration") or 0) for e in entries if int(e.get("duration") or 0) > 0)
    return success_response(
        message=f"Found {len(entries)} time entries for task {task_id} ({_format_duration(total)})",
        task_id=task_id,
        time_entries=entries,
        total_duration_ms=total,
    )


async def handle_start_time_tracking(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    task_id = await resolve_task_id(params, services)
    current = await services.time_tracking.get_current()
    payload = copy_present(params, _ENTRY_FIELDS, {"tid": task_id})
    entry = await services.time_tracking.start(payload)
    warnings = []
    if current:
        warnings.append(
            f"Stopped the running timer on task {(current.get('task') or {}).get('id')}"
        )
    return success_response(
        message=f"Started time tracking on task {task_id}",
        task_id=task_id,
        time_entry=entry,
        warnings=warnings,
    )


async def handle_stop_time_tracking(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    current = await services.time_tracking.get_current()
    if not current:
        return success_response(message="No timer is running", time_entry=None)
    entry = await services.time_tracking.stop()
    return success_response(
        message=f"Stopped time tracking on task {(entry.get('task') or {}).get('id')}",
        time_entry=entry,
    )


async def handle_add_time_entry(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    start = to_timestamp_ms(params["start"], "start")
    duration = to_duration_ms(params["duration"], "duration")
    task_id = await resolve_task_id(params, services)
    payload = copy_present(
        params, _ENTRY_FIELDS + (("assignee", "assignee"),), {"tid": task_id}
    )
    payload.update({"start": start, "duration": duration})
    entry = await services.time_tracking.add(payload)
    return success_response(
        message=f"Added {_format_duration(duration)} to task {task_id}",
        task_id=task_id,
        time_entry=entry,
    )


async def handle_delete_time_entry(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    entry_id = params["timeEntryId"]
    await services.time_tracking.delete(entry_id)
    return success_response(
        message=f"Successfully deleted time entry: {entry_id}", time_entry_id=entry_id
    )


async def handle_get_current_time_entry(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    entry = await services.time_tracking.get_current(assignee=params.get("assignee"))
    if not entry:
        return success_response(message="No timer is running", time_entry=None)
    return success_response(
        message=f"Timer running on task {(entry.get('task') or {}).get('id')}",
        time_entry=entry,
    )


TOOLS = (
    ToolDefinition(
        name="get_task_time_entries",
        description="Get time entries recorded on a task, optionally within a date range.",
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                "startDate": date_prop("Only entries after this time"),
                "endDate": date_prop("Only entries before this time"),
                "assignee": string_prop("Comma-separated user ids to filter by"),
            }
        ),
        handler=handle_get_task_time_entries,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="start_time_tracking",
        description=(
            "Start a timer on a task. A timer already running for the user is stopped "
            "by ClickUp first."
        ),
        input_schema=object_schema({**TASK_REF_PROPS, **_ENTRY_PROPS}),
        handler=handle_start_time_tracking,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="stop_time_tracking",
        description="Stop the running timer, if any.",
        input_schema=object_schema({}),
        handler=handle_stop_time_tracking,
    ),
    ToolDefinition(
        name="add_time_entry",
        description=(
            "Record time on a task manually. Duration accepts milliseconds or a string "
            "like '1h 30m'."
        ),
        input_schema=object_schema(
            {
                **TASK_REF_PROPS,
                "start": date_prop("When the work started"),
                "duration": {
                    "type": ["string", "integer"],
                    "description": "Duration in milliseconds or as a string like '1h 30m'",
                },
                "assignee": {"type": "integer", "description": "User id the time belongs to"},
                **_ENTRY_PROPS,
            },
            required=["start", "duration"],
        ),
        handler=handle_add_time_entry,
        identifier_groups=(TASK_REF,),
    ),
    ToolDefinition(
        name="delete_time_entry",
        description="Delete a time entry by id.",
        input_schema=object_schema(
            {"timeEntryId": string_prop("ID of the time entry")}, required=["timeEntryId"]
        ),
        handler=handle_delete_time_entry,
    ),
    ToolDefinition(
        name="get_current_time_entry",
        description="Get the running timer, if any.",
        input_schema=object_schema(
            {"assignee": string_prop("User id whose timer to check; defaults to you")}
        ),
        handler=handle_get_current_time_entry,
    ),
)

"""Helpers shared by the tool modules.

Value conversion (dates, durations) raises ``InvalidParamsError``
so bad values surface as ``invalid_params`` rather than backend errors.
Resolvers turn an "id or name" parameter pair into an id, using the id
without any lookup when both are supplied.
"""

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Tuple

from clickup_mcp.core.errors import InvalidParamsError
from clickup_mcp.core.validation import is_present

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

_DURATION_PART = re.compile(
    r"(\d+(?:\.\d+)?)\s*(hours?|hrs|hr|h|minutes?|mins|min|m|seconds?|secs|sec|s)"
)
_UNIT_MS = {"h": 3_600_000, "m": 60_000, "s": 1_000}


# ---------------------------------------------------------------------------
# Schema fragments
# ---------------------------------------------------------------------------


def string_prop(description: str, **extra: Any) -> Dict[str, Any]:
    return {"type": "string", "description": description, **extra}


def bool_prop(description: str) -> Dict[str, Any]:
    return {"type": "boolean", "description": description}


def object_schema(
    properties: Dict[str, Any], required: Iterable[str] = ()
) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    required = list(required)
    if required:
        schema["required"] = required
    return schema


DATE_PROP_DESCRIPTION = (
    "Unix timestamp in milliseconds or an ISO-8601 date/datetime "
    "(e.g. '2024-05-01' or '2024-05-01T09:30:00Z')"
)


def date_prop(description: str) -> Dict[str, Any]:
    return {
        "type": ["string", "integer"],
        "description": f"{description}. {DATE_PROP_DESCRIPTION}",
    }


PRIORITY_PROP = {
    "type": "integer",
    "enum": [1, 2, 3, 4],
    "description": "Priority: 1 (urgent), 2 (high), 3 (normal), 4 (low)",
}

ASSIGNEES_PROP = {
    "type": "array",
    "items": {"type": ["string", "integer"]},
    "description": "Assignees as user ids, emails or usernames",
}


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------


def to_timestamp_ms(value: Any, field_name: str = "date") -> int:
    """Convert a Unix-ms integer, digit string, or ISO-8601 string to Unix ms.

    Naive datetimes are taken as UTC.
    """
    if isinstance(value, bool):
        raise InvalidParamsError(f"{field_name} must be a date, got {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidParamsError(
            f"{field_name} must be a Unix timestamp in milliseconds or an ISO-8601 date, "
            f"got {value!r}"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def to_duration_ms(value: Any, field_name: str = "duration") -> int:
    """Convert milliseconds or a string like "1h 30m" / "45m" / "90s" to ms."""
    if isinstance(value, bool):
        raise InvalidParamsError(f"{field_name} must be a duration, got {value!r}")
    if isinstance(value, int):
        total = value
    else:
        text = str(value).strip().lower()
        if text.isdigit():
            total = int(text)
        else:
            parts = _DURATION_PART.findall(text)
            leftover = _DURATION_PART.sub("", text).strip()
            if not parts or leftover:
                raise InvalidParamsError(
                    f"{field_name} must be milliseconds or a string like '1h 30m', got {value!r}"
                )
            total = int(sum(float(amount) * _UNIT_MS[unit[0]] for amount, unit in parts))
    if total <= 0:
        raise InvalidParamsError(f"{field_name} must be positive")
    return total


def copy_present(
    params: Mapping[str, Any],
    mapping: Iterable[Tuple[str, str]],
    target: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Copy supplied parameters into a payload under their API names.

    Keys that are absent stay absent; explicit ``False`` and ``0`` are copied.
    """
    payload = target if target is not None else {}
    for param_name, api_name in mapping:
        if param_name in params and params[param_name] is not None:
            payload[api_name] = params[param_name]
    return payload


# ---------------------------------------------------------------------------
# Name resolution
# ---------------------------------------------------------------------------


async def resolve_space_id(
    params: Mapping[str, Any],
    services: "ClickUpServices",
    *,
    id_field: str = "spaceId",
    name_field: str = "spaceName",
) -> str:
    if is_present(params, id_field):
        return str(params[id_field])
    space = await services.workspace.find_space_by_name(params[name_field])
    return str(space["id"])


async def resolve_list_id(
    params: Mapping[str, Any],
    services: "ClickUpServices",
    *,
    id_field: str = "listId",
    name_field: str = "listName",
) -> str:
    if is_present(params, id_field):
        return str(params[id_field])
    found = await services.lists.find_list_by_name(params[name_field])
    return str(found["id"])


async def resolve_folder_id(params: Mapping[str, Any], services: "ClickUpServices") -> str:
    if is_present(params, "folderId"):
        return str(params["folderId"])
    space_id = await resolve_space_id(params, services)
    folder = await services.folders.find_folder_by_name(space_id, params["folderName"])
    return str(folder["id"])


async def resolve_task_id(
    params: Mapping[str, Any],
    services: "ClickUpServices",
    *,
    id_field: str = "taskId",
    name_field: str = "taskName",
) -> str:
    """Resolve a task by id, or by name scoped to ``listName``/``listId`` if given."""
    if is_present(params, id_field):
        return str(params[id_field])
    list_id = None
    if is_present(params, "listId") or is_present(params, "listName"):
        list_id = await resolve_list_id(params, services)
    task = await services.tasks.find_task_by_name(params[name_field], list_id=list_id)
    return str(task["id"])


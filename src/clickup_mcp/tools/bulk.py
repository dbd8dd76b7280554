"""Bulk task tools.

Every item is validated and executed on its own, so one bad item does not
stop the others. The response reports each item by its zero-based index
together with a summary. If every item fails, the call is an execution
error that still carries the per-item report.

``options.continueOnError`` (default true) runs items concurrently, at most
``options.concurrency`` at a time. When false, items run one after another
and the first failure marks the remaining items as skipped.
"""

import asyncio
import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
)

from clickup_mcp.core.errors import InvalidParamsError, ToolError
from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import (
    ErrorCode,
    ToolResponse,
    execution_error,
    success_response,
)
from clickup_mcp.core.validation import validate_batch_item
from clickup_mcp.services.base import ClickUpServiceError
from clickup_mcp.tools.common import object_schema, resolve_list_id, resolve_task_id, string_prop
from clickup_mcp.tools.task import (
    TARGET_LIST_PROPS,
    TASK_BODY_PROPS,
    TASK_REF_PROPS,
    TASK_UPDATE_FIELDS,
    TASK_UPDATE_PROPS,
    build_task_payload,
    build_task_update,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5

ItemOperation = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

LIST_REF = ResourceRef("listId", "listName", label="list")
TASK_REF = ResourceRef("taskId", "taskName", label="task")
TARGET_LIST_REF = ResourceRef("targetListId", "targetListName", label="target list")

OPTIONS_PROP = {
    "type": "object",
    "description": "Batch execution options",
    "properties": {
        "concurrency": {
            "type": "integer",
            "minimum": 1,
            "maximum": 50,
            "description": f"Items processed at once (default {DEFAULT_CONCURRENCY})",
        },
        "continueOnError": {
            "type": "boolean",
            "description": (
                "Keep going after a failed item (default true). When false, items run "
                "in order and the rest are skipped after the first failure."
            ),
        },
    },
}


def _item_error(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, ClickUpServiceError):
        return {
            "message": exc.message,
            "error_code": ErrorCode.SERVICE_ERROR.value,
            "status_code": exc.status_code,
        }
    if isinstance(exc, ToolError):
        return {"message": exc.message, "error_code": exc.error_code.value}
    return {"message": str(exc) or type(exc).__name__, "error_code": ErrorCode.INTERNAL_ERROR.value}


async def run_batch(
    definition: ToolDefinition,
    items: List[Any],
    operation: ItemOperation,
    options: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Validate and run ``operation`` for each item and build the batch report."""
    options = options or {}
    concurrency = options.get("concurrency") or DEFAULT_CONCURRENCY
    continue_on_error = options.get("continueOnError", True)

    async def run_one(index: int, item: Any) -> Dict[str, Any]:
        try:
            params = validate_batch_item(definition, index, item)
            task = await operation(params)
        except InvalidParamsError as e:
            message = e.message if e.message.startswith("item ") else f"item {index}: {e.message}"
            return {
                "index": index,
                "success": False,
                "status": "failed",
                "error": {"message": message, "error_code": e.error_code.value},
            }
        except Exception as e:
            if not isinstance(e, ToolError):
                logger.exception(f"Unexpected error in {definition.name} item {index}")
            return {"index": index, "success": False, "status": "failed", "error": _item_error(e)}
        return {"index": index, "success": True, "status": "succeeded", "task": task}

    results: List[Dict[str, Any]] = []
    if continue_on_error:
        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(index: int, item: Any) -> Dict[str, Any]:
            async with semaphore:
                return await run_one(index, item)

        results = list(await asyncio.gather(*(bounded(i, item) for i, item in enumerate(items))))
    else:
        stopped = False
        for index, item in enumerate(items):
            if stopped:
                results.append({"index": index, "success": False, "status": "skipped"})
                continue
            result = await run_one(index, item)
            stopped = result["status"] == "failed"
            results.append(result)

    summary = {
        "total": len(items),
        "succeeded": sum(1 for r in results if r["status"] == "succeeded"),
        "failed": sum(1 for r in results if r["status"] == "failed"),
        "skipped": sum(1 for r in results if r["status"] == "skipped"),
    }
    logger.info(f"{definition.name}: {summary['succeeded']}/{summary['total']} items succeeded")

    if items and summary["succeeded"] == 0:
        first_error = next(r["error"]["message"] for r in results if r["status"] == "failed")
        return execution_error(
            definition.name,
            f"All {summary['failed']} items failed; first error: {first_error}",
            error_code=ErrorCode.BATCH_FAILED,
            details={"results": results, "summary": summary},
        )

    warnings = []
    if summary["failed"]:
        warnings.append(f"{summary['failed']} of {summary['total']} items failed")
    return success_response(
        message=f"Processed {summary['total']} items: {summary['succeeded']} succeeded, "
        f"{summary['failed']} failed, {summary['skipped']} skipped",
        results=results,
        summary=summary,
        warnings=warnings,
    )


async def handle_create_bulk_tasks(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    list_id = await resolve_list_id(params, services)

    async def create(item: Dict[str, Any]) -> Dict[str, Any]:
        payload = await build_task_payload(item, services)
        return await services.tasks.create_task(list_id, payload)

    return await run_batch(CREATE_BULK_TASKS, params["tasks"], create, params.get("options"))


async def handle_update_bulk_tasks(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    async def update(item: Dict[str, Any]) -> Dict[str, Any]:
        payload = build_task_update(item)
        task_id = await resolve_task_id(item, services)
        return await services.tasks.update_task(task_id, payload)

    return await run_batch(UPDATE_BULK_TASKS, params["tasks"], update, params.get("options"))


async def handle_move_bulk_tasks(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    list_id = await resolve_list_id(
        params, services, id_field="targetListId", name_field="targetListName"
    )

    async def move(item: Dict[str, Any]) -> Dict[str, Any]:
        task_id = await resolve_task_id(item, services)
        return await services.tasks.move_task(task_id, list_id)

    return await run_batch(MOVE_BULK_TASKS, params["tasks"], move, params.get("options"))


async def handle_delete_bulk_tasks(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    async def delete(item: Dict[str, Any]) -> Dict[str, Any]:
        task_id = await resolve_task_id(item, services)
        await services.tasks.delete_task(task_id)
        return {"id": task_id}

    return await run_batch(DELETE_BULK_TASKS, params["tasks"], delete, params.get("options"))


def _tasks_prop(item_properties: Dict[str, Any], required: Sequence[str] = ()) -> Dict[str, Any]:
    return {
        "type": "array",
        "minItems": 1,
        "description": "Tasks to process; each is handled independently",
        "items": object_schema(item_properties, required=required),
    }


CREATE_BULK_TASKS = ToolDefinition(
    name="create_bulk_tasks",
    description=(
        "Create several tasks in one list. Each task is created independently; the "
        "response reports every item by its zero-based index."
    ),
    input_schema=object_schema(
        {
            "listId": string_prop("ID of the list. Preferred over listName when both are given"),
            "listName": string_prop("Name of the list (alternative to listId)"),
            "tasks": _tasks_prop(
                {"name": string_prop("Name of the task"), **TASK_BODY_PROPS}, required=["name"]
            ),
            "options": OPTIONS_PROP,
        },
        required=["tasks"],
    ),
    handler=handle_create_bulk_tasks,
    identifier_groups=(LIST_REF,),
    batch_field="tasks",
)

UPDATE_BULK_TASKS = ToolDefinition(
    name="update_bulk_tasks",
    description=(
        "Update several tasks. Each item identifies its task by taskId, or by taskName "
        "(optionally with listName), and carries the fields to change."
    ),
    input_schema=object_schema(
        {
            "tasks": _tasks_prop({**TASK_REF_PROPS, **TASK_UPDATE_PROPS}),
            "options": OPTIONS_PROP,
        },
        required=["tasks"],
    ),
    handler=handle_update_bulk_tasks,
    batch_field="tasks",
    item_identifier_groups=(TASK_REF,),
    item_update_fields=TASK_UPDATE_FIELDS,
)

MOVE_BULK_TASKS = ToolDefinition(
    name="move_bulk_tasks",
    description=(
        "Move several tasks to one list. Moved tasks are recreated in the destination "
        "list and get new ids."
    ),
    input_schema=object_schema(
        {
            **TARGET_LIST_PROPS,
            "tasks": _tasks_prop(dict(TASK_REF_PROPS)),
            "options": OPTIONS_PROP,
        },
        required=["tasks"],
    ),
    handler=handle_move_bulk_tasks,
    identifier_groups=(TARGET_LIST_REF,),
    batch_field="tasks",
    item_identifier_groups=(TASK_REF,),
)

DELETE_BULK_TASKS = ToolDefinition(
    name="delete_bulk_tasks",
    description="Permanently delete several tasks. This cannot be undone.",
    input_schema=object_schema(
        {"tasks": _tasks_prop(dict(TASK_REF_PROPS)), "options": OPTIONS_PROP},
        required=["tasks"],
    ),
    handler=handle_delete_bulk_tasks,
    batch_field="tasks",
    item_identifier_groups=(TASK_REF,),
)

TOOLS = (CREATE_BULK_TASKS, UPDATE_BULK_TASKS, MOVE_BULK_TASKS, DELETE_BULK_TASKS)

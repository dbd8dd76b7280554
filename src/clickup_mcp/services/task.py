"""Task endpoints: CRUD, comments, attachments and workspace search."""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from clickup_mcp.core.matching import find_by_name
from clickup_mcp.services.base import BaseService

logger = logging.getLogger(__name__)

# Custom task ids look like "DEV-1234"; native ids are short alphanumerics.
CUSTOM_TASK_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]*-\d+$")

# Fields copied when a task is recreated in another list.
_COPY_FIELDS = (
    "description",
    "markdown_description",
    "priority",
    "due_date",
    "start_date",
    "time_estimate",
)


def is_custom_task_id(task_id: str) -> bool:
    return bool(CUSTOM_TASK_ID_PATTERN.match(task_id))


def task_to_payload(task: Dict[str, Any], *, name: Optional[str] = None) -> Dict[str, Any]:
    """Convert a task as returned by ClickUp into a create payload."""
    payload: Dict[str, Any] = {"name": name or task.get("name")}
    for key in _COPY_FIELDS:
        value = task.get(key)
        if value is None:
            continue
        if key == "priority" and isinstance(value, dict):
            # ClickUp returns priority as {"id": "2", "priority": "high"}
            if not value.get("id"):
                continue
            value = int(value["id"])
        payload[key] = value
    status = task.get("status")
    if isinstance(status, dict) and status.get("status"):
        payload["status"] = status["status"]
    if task.get("assignees"):
        payload["assignees"] = [a["id"] for a in task["assignees"] if "id" in a]
    if task.get("tags"):
        payload["tags"] = [t["name"] for t in task["tags"] if "name" in t]
    return payload


class TaskService(BaseService):
    async def create_task(self, list_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(f"/list/{list_id}/task", json=payload)

    async def get_task(self, task_id: str, *, subtasks: Optional[bool] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if is_custom_task_id(task_id):
            params.update({"custom_task_ids": "true", "team_id": self.team_id})
        if subtasks is not None:
            params["include_subtasks"] = str(subtasks).lower()
        return await self.client.get(f"/task/{task_id}", params=params or None)

    async def update_task(self, task_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put(f"/task/{task_id}", json=payload)

    async def delete_task(self, task_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/task/{task_id}")

    async def _all_pages(
        self, path: str, params: Sequence[Tuple[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Read every page of a task listing (100 tasks per page)."""
        tasks: List[Dict[str, Any]] = []
        page = 0
        while True:
            data = await self.client.get(path, params=[*params, ("page", page)])
            batch = data.get("tasks", [])
            tasks.extend(batch)
            if not batch or data.get("last_page", True):
                return tasks
            page += 1

    async def get_list_tasks(self, list_id: str) -> List[Dict[str, Any]]:
        return await self._all_pages(
            f"/list/{list_id}/task",
            [("include_closed", "true"), ("subtasks", "true")],
        )

    async def find_task_by_name(
        self, name: str, *, list_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Resolve a task name, scoped to one list when ``list_id`` is given."""
        if list_id:
            tasks = await self.get_list_tasks(list_id)
            return find_by_name(tasks, name, resource_type="Task", scope=f"list {list_id}")
        tasks = await self._all_pages(
            f"/team/{self.team_id}/task",
            [("include_closed", "true"), ("subtasks", "true")],
        )
        return find_by_name(tasks, name, resource_type="Task")

    async def duplicate_task(
        self,
        task_id: str,
        *,
        list_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        original = await self.get_task(task_id)
        target_list = list_id or original.get("list", {}).get("id")
        return await self.create_task(target_list, task_to_payload(original, name=name))

    async def move_task(self, task_id: str, list_id: str) -> Dict[str, Any]:
        """Move a task by recreating it in ``list_id`` and deleting the original.

        The moved task gets a new id.
        """
        original = await self.get_task(task_id)
        moved = await self.create_task(list_id, task_to_payload(original))
        await self.delete_task(original.get("id", task_id))
        logger.debug(f"Moved task {task_id} -> {moved.get('id')} in list {list_id}")
        return moved

    async def get_comments(
        self,
        task_id: str,
        *,
        start: Optional[int] = None,
        start_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if start is not None:
            params["start"] = start
        if start_id is not None:
            params["start_id"] = start_id
        data = await self.client.get(f"/task/{task_id}/comment", params=params or None)
        return data.get("comments", [])

    async def create_comment(self, task_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(f"/task/{task_id}/comment", json=payload)

    async def attach_file(self, task_id: str, filename: str, content: bytes) -> Dict[str, Any]:
        return await self.client.post(
            f"/task/{task_id}/attachment",
            files={"attachment": (filename, content)},
        )

    async def get_workspace_tasks(
        self, params: Sequence[Tuple[str, Any]]
    ) -> Dict[str, Any]:
        """Filtered task search across the workspace.

        ``params`` is a list of pairs so array filters (``statuses[]``...)
        can repeat their key.
        """
        return await self.client.get(f"/team/{self.team_id}/task", params=list(params))

"""Time entry endpoints (team scoped)."""

from typing import Any, Dict, List, Optional

from clickup_mcp.services.base import BaseService


class TimeTrackingService(BaseService):
    def _path(self, suffix: str = "") -> str:
        return f"/team/{self.team_id}/time_entries{suffix}"

    async def get_task_time_entries(
        self,
        task_id: str,
        *,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        assignee: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"task_id": task_id}
        if start_date is not None:
            params["start_date"] = start_date
        if end_date is not None:
            params["end_date"] = end_date
        if assignee is not None:
            params["assignee"] = assignee
        data = await self.client.get(self._path(), params=params)
        return data.get("data", [])

    async def start(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.client.post(self._path("/start"), json=payload)
        return data.get("data", data)

    async def stop(self) -> Dict[str, Any]:
        data = await self.client.post(self._path("/stop"))
        return data.get("data", data)

    async def add(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.client.post(self._path(), json=payload)
        return data.get("data", data)

    async def delete(self, entry_id: str) -> Dict[str, Any]:
        return await self.client.delete(self._path(f"/{entry_id}"))

    async def get_current(self, *, assignee: Optional[str] = None) -> Optional[Dict[str, Any]]:
        params = {"assignee": assignee} if assignee is not None else None
        data = await self.client.get(self._path("/current"), params=params)
        return data.get("data") or None

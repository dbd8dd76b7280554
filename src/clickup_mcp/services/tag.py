"""Space tag endpoints."""

from typing import Any, Dict, List
from urllib.parse import quote

from clickup_mcp.services.base import BaseService


class TagService(BaseService):
    async def get_space_tags(self, space_id: str) -> List[Dict[str, Any]]:
        data = await self.client.get(f"/space/{space_id}/tag")
        return data.get("tags", [])

    async def add_tag_to_task(self, task_id: str, tag_name: str) -> Dict[str, Any]:
        return await self.client.post(f"/task/{task_id}/tag/{quote(tag_name, safe='')}")

    async def remove_tag_from_task(self, task_id: str, tag_name: str) -> Dict[str, Any]:
        return await self.client.delete(f"/task/{task_id}/tag/{quote(tag_name, safe='')}")

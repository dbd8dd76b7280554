"""Folder endpoints."""

from typing import Any, Dict, List

from clickup_mcp.core.matching import find_by_name
from clickup_mcp.services.base import BaseService


class FolderService(BaseService):
    async def create_folder(self, space_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(f"/space/{space_id}/folder", json=payload)

    async def get_folder(self, folder_id: str) -> Dict[str, Any]:
        return await self.client.get(f"/folder/{folder_id}")

    async def update_folder(self, folder_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put(f"/folder/{folder_id}", json=payload)

    async def delete_folder(self, folder_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/folder/{folder_id}")

    async def get_folders(self, space_id: str) -> List[Dict[str, Any]]:
        data = await self.client.get(f"/space/{space_id}/folder")
        return data.get("folders", [])

    async def find_folder_by_name(self, space_id: str, name: str) -> Dict[str, Any]:
        return find_by_name(
            await self.get_folders(space_id),
            name,
            resource_type="Folder",
            scope=f"space {space_id}",
        )

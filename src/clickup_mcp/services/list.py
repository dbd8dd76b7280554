"""List endpoints."""

from typing import Any, Dict

from clickup_mcp.core.matching import find_by_name
from clickup_mcp.services.base import BaseService, ClickUpClient
from clickup_mcp.services.workspace import WorkspaceService


class ListService(BaseService):
    """List CRUD. Name lookup walks the workspace hierarchy."""

    def __init__(self, client: ClickUpClient, workspace: WorkspaceService):
        super().__init__(client)
        self.workspace = workspace

    async def create_list(self, space_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(f"/space/{space_id}/list", json=payload)

    async def create_list_in_folder(
        self, folder_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self.client.post(f"/folder/{folder_id}/list", json=payload)

    async def get_list(self, list_id: str) -> Dict[str, Any]:
        return await self.client.get(f"/list/{list_id}")

    async def update_list(self, list_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put(f"/list/{list_id}", json=payload)

    async def delete_list(self, list_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/list/{list_id}")

    async def find_list_by_name(self, name: str) -> Dict[str, Any]:
        return find_by_name(
            await self.workspace.get_all_lists(), name, resource_type="List"
        )

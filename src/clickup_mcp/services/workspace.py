"""Spaces and the workspace hierarchy."""

import asyncio
import logging
from typing import Any, Dict, List

from clickup_mcp.core.matching import find_by_name
from clickup_mcp.services.base import BaseService

logger = logging.getLogger(__name__)


class WorkspaceService(BaseService):
    """Space CRUD plus the space -> folder -> list tree."""

    async def get_spaces(self, *, archived: bool = False) -> List[Dict[str, Any]]:
        data = await self.client.get(
            f"/team/{self.team_id}/space",
            params={"archived": str(archived).lower()},
        )
        return data.get("spaces", [])

    async def create_space(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(f"/team/{self.team_id}/space", json=payload)

    async def update_space(self, space_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put(f"/space/{space_id}", json=payload)

    async def delete_space(self, space_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/space/{space_id}")

    async def find_space_by_name(self, name: str) -> Dict[str, Any]:
        return find_by_name(await self.get_spaces(), name, resource_type="Space")

    async def get_folders(self, space_id: str) -> List[Dict[str, Any]]:
        data = await self.client.get(f"/space/{space_id}/folder")
        return data.get("folders", [])

    async def get_folderless_lists(self, space_id: str) -> List[Dict[str, Any]]:
        data = await self.client.get(f"/space/{space_id}/list")
        return data.get("lists", [])

    async def get_hierarchy(self) -> Dict[str, Any]:
        """Build the workspace tree.

        Returns:
            {"id": team_id, "spaces": [{id, name, folders: [{id, name,
            lists: [...]}], lists: [...]}]}. Folder entries embed their lists
            as returned by ClickUp; ``lists`` at space level holds the
            folderless lists.
        """
        spaces = await self.get_spaces()

        async def expand(space: Dict[str, Any]) -> Dict[str, Any]:
            folders, lists = await asyncio.gather(
                self.get_folders(space["id"]),
                self.get_folderless_lists(space["id"]),
            )
            return {
                "id": space["id"],
                "name": space.get("name"),
                "folders": [
                    {
                        "id": folder["id"],
                        "name": folder.get("name"),
                        "lists": [
                            {"id": lst["id"], "name": lst.get("name")}
                            for lst in folder.get("lists", [])
                        ],
                    }
                    for folder in folders
                ],
                "lists": [{"id": lst["id"], "name": lst.get("name")} for lst in lists],
            }

        expanded = await asyncio.gather(*(expand(space) for space in spaces))
        logger.debug(f"Loaded hierarchy for {len(expanded)} spaces")
        return {"id": self.team_id, "spaces": list(expanded)}

    async def get_all_lists(self) -> List[Dict[str, Any]]:
        """Flatten the hierarchy into ``{id, name, space, folder}`` records."""
        hierarchy = await self.get_hierarchy()
        records: List[Dict[str, Any]] = []
        for space in hierarchy["spaces"]:
            space_ref = {"id": space["id"], "name": space["name"]}
            for lst in space["lists"]:
                records.append({**lst, "space": space_ref, "folder": None})
            for folder in space["folders"]:
                folder_ref = {"id": folder["id"], "name": folder["name"]}
                for lst in folder["lists"]:
                    records.append({**lst, "space": space_ref, "folder": folder_ref})
        return records

"""Docs endpoints. Docs only exist in the v3 API."""

from typing import Any, Dict, List, Optional, Sequence

from clickup_mcp.services.base import BaseService


class DocumentService(BaseService):
    def _path(self, suffix: str = "") -> str:
        return f"/workspaces/{self.team_id}/docs{suffix}"

    async def create_document(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(self._path(), json=payload, version="v3")

    async def get_document(self, document_id: str) -> Dict[str, Any]:
        return await self.client.get(self._path(f"/{document_id}"), version="v3")

    async def list_documents(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """One page of documents: ``{"docs": [...], "next_cursor": str | None}``."""
        data = await self.client.get(self._path(), params=params or None, version="v3")
        if isinstance(data, list):
            return {"docs": data, "next_cursor": None}
        return {"docs": data.get("docs", []), "next_cursor": data.get("next_cursor")}

    async def list_pages(self, document_id: str) -> List[Dict[str, Any]]:
        data = await self.client.get(self._path(f"/{document_id}/pageListing"), version="v3")
        return data if isinstance(data, list) else data.get("pages", [])

    async def get_pages(
        self,
        document_id: str,
        page_ids: Sequence[str],
        *,
        content_format: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"content_format": content_format} if content_format else None
        pages = []
        for page_id in page_ids:
            pages.append(
                await self.client.get(
                    self._path(f"/{document_id}/pages/{page_id}"),
                    params=params,
                    version="v3",
                )
            )
        return pages

    async def create_page(self, document_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            self._path(f"/{document_id}/pages"), json=payload, version="v3"
        )

    async def update_page(
        self, document_id: str, page_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self.client.put(
            self._path(f"/{document_id}/pages/{page_id}"), json=payload, version="v3"
        )

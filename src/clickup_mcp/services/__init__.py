"""ClickUp backend services.

``create_clickup_services`` builds the single shared client and the
per-resource services on top of it. The bundle is handed to the dispatcher,
which passes it to every tool handler.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from clickup_mcp.config import ServerConfig
from clickup_mcp.services.base import ClickUpClient, ClickUpServiceError
from clickup_mcp.services.document import DocumentService
from clickup_mcp.services.folder import FolderService
from clickup_mcp.services.list import ListService
from clickup_mcp.services.member import MemberService
from clickup_mcp.services.tag import TagService
from clickup_mcp.services.task import TaskService
from clickup_mcp.services.time_tracking import TimeTrackingService
from clickup_mcp.services.workspace import WorkspaceService

__all__ = [
    "ClickUpClient",
    "ClickUpServiceError",
    "ClickUpServices",
    "create_clickup_services",
]


@dataclass
class ClickUpServices:
    client: ClickUpClient
    workspace: WorkspaceService
    folders: FolderService
    lists: ListService
    tasks: TaskService
    tags: TagService
    time_tracking: TimeTrackingService
    documents: DocumentService
    members: MemberService

    @classmethod
    def from_client(cls, client: ClickUpClient) -> "ClickUpServices":
        workspace = WorkspaceService(client)
        return cls(
            client=client,
            workspace=workspace,
            folders=FolderService(client),
            lists=ListService(client, workspace),
            tasks=TaskService(client),
            tags=TagService(client),
            time_tracking=TimeTrackingService(client),
            documents=DocumentService(client),
            members=MemberService(client),
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def create_clickup_services(
    config: ServerConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClickUpServices:
    """Create the service bundle from configuration.

    Args:
        config: Server configuration (API key, team id, base URL, timeout)
        transport: Optional httpx transport, used by tests to stub the API
    """
    client = ClickUpClient(
        config.api_key,
        config.team_id,
        base_url=config.api_base_url,
        timeout=config.request_timeout,
        transport=transport,
    )
    return ClickUpServices.from_client(client)

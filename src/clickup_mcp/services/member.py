"""Workspace members and assignee resolution."""

from typing import Any, Dict, Iterable, List

from clickup_mcp.core.errors import ResourceNotFoundError
from clickup_mcp.core.matching import find_member
from clickup_mcp.services.base import BaseService


class MemberService(BaseService):
    async def get_members(self) -> List[Dict[str, Any]]:
        """Members of the configured workspace, flattened to their user records."""
        data = await self.client.get("/team")
        for team in data.get("teams", []):
            if str(team.get("id")) == str(self.team_id):
                return [m["user"] for m in team.get("members", []) if "user" in m]
        raise ResourceNotFoundError("Workspace", self.team_id)

    async def find_member(self, query: str) -> Dict[str, Any]:
        return find_member(await self.get_members(), query)

    async def resolve_assignees(self, values: Iterable[Any]) -> List[int]:
        """Map user ids, emails or usernames to numeric user ids.

        Numeric values pass through without a lookup; the member list is
        fetched at most once.
        """
        resolved: List[int] = []
        members = None
        for value in values:
            if isinstance(value, int) or str(value).strip().isdigit():
                resolved.append(int(value))
                continue
            if members is None:
                members = await self.get_members()
            resolved.append(int(find_member(members, str(value))["id"]))
        return resolved

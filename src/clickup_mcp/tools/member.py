"""Workspace member tools."""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.registry import ToolDefinition
from clickup_mcp.core.responses import ToolResponse, success_response
from clickup_mcp.tools.common import ASSIGNEES_PROP, object_schema, string_prop

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices


def member_summary(member: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": member.get("id"),
        "username": member.get("username"),
        "email": member.get("email"),
        "role": member.get("role"),
    }


async def handle_get_workspace_members(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    members = await services.members.get_members()
    return success_response(
        message=f"Found {len(members)} workspace members",
        members=[member_summary(m) for m in members],
    )


async def handle_find_member_by_name(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    member = await services.members.find_member(params["nameOrEmail"])
    return success_response(
        message=f"Found member: {member.get('username')} (ID: {member.get('id')})",
        member=member_summary(member),
    )


async def handle_resolve_assignees(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    user_ids = await services.members.resolve_assignees(params["assignees"])
    return success_response(
        message=f"Resolved {len(user_ids)} assignees",
        user_ids=user_ids,
    )


TOOLS = (
    ToolDefinition(
        name="get_workspace_members",
        description="List the members of the workspace with their user ids.",
        input_schema=object_schema({}),
        handler=handle_get_workspace_members,
    ),
    ToolDefinition(
        name="find_member_by_name",
        description=(
            "Find a workspace member by email or username. An exact match wins; "
            "otherwise a unique partial username match is accepted."
        ),
        input_schema=object_schema(
            {"nameOrEmail": string_prop("Email address or username")},
            required=["nameOrEmail"],
        ),
        handler=handle_find_member_by_name,
    ),
    ToolDefinition(
        name="resolve_assignees",
        description="Turn a mix of user ids, emails and usernames into user ids.",
        input_schema=object_schema(
            {"assignees": {**ASSIGNEES_PROP, "minItems": 1}}, required=["assignees"]
        ),
        handler=handle_resolve_assignees,
    ),
)

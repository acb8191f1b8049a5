"""Workspace and user tools."""

from urllib.parse import quote

from ..client import add_query_params, build_api_url, execute_json_request
from ..models import ToolResponse
from ..schemas import GetCurrentUserArgs, GetUserArgs, GetWorkspaceArgs, ListWorkspacesArgs


async def handle_list_workspaces(args: dict) -> ToolResponse:
    parsed = ListWorkspacesArgs.model_validate(args)
    url = add_query_params(build_api_url("/workspaces"), {"page": parsed.page, "pagelen": parsed.pagelen})
    data = await execute_json_request(url)

    workspace_list = "\n\n".join(
        f"- {ws.get('slug')} ({ws.get('name')})\n"
        f"  Type: {ws.get('type')}\n"
        f"  Created: {ws.get('created_on') or 'Unknown'}"
        for ws in data.get("values", [])
    )
    return ToolResponse(f"Accessible workspaces ({data.get('size', 0)} total):\n\n{workspace_list}")


async def handle_get_workspace(args: dict) -> ToolResponse:
    parsed = GetWorkspaceArgs.model_validate(args)
    ws = await execute_json_request(build_api_url(f"/workspaces/{parsed.workspace}"))
    return ToolResponse(
        f"Workspace: {ws.get('name')} ({ws.get('slug')})\n"
        f"Type: {ws.get('type')}\n"
        f"UUID: {ws.get('uuid') or 'Not available'}\n"
        f"Created: {ws.get('created_on') or 'Unknown'}"
    )


def _format_user(user: dict, heading: str) -> str:
    username = f" (@{user['username']})" if user.get("username") else ""
    return (
        f"{heading}: {user.get('display_name')}{username}\n"
        f"UUID: {user.get('uuid') or 'Not available'}\n"
        f"Account ID: {user.get('account_id') or 'Not available'}\n"
        f"Type: {user.get('type')}\n"
        f"Website: {user.get('website') or 'None'}\n"
        f"Location: {user.get('location') or 'Not specified'}\n"
        f"Created: {user.get('created_on') or 'Not available'}"
    )


async def handle_get_user(args: dict) -> ToolResponse:
    parsed = GetUserArgs.model_validate(args)
    if parsed.selected_user:
        url = build_api_url(f"/users/{quote(parsed.selected_user, safe='')}")
    else:
        url = build_api_url("/user")
    return ToolResponse(_format_user(await execute_json_request(url), "User"))


async def handle_get_current_user(args: dict) -> ToolResponse:
    GetCurrentUserArgs.model_validate(args)
    user = await execute_json_request(build_api_url("/user"))
    return ToolResponse(_format_user(user, "Current User"))

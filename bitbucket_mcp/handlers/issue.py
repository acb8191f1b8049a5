"""Issue tracker tools."""

from ..client import add_query_params, build_api_url, execute_json_request
from ..models import ToolResponse
from ..schemas import GetIssueArgs, GetIssuesArgs


def _name(user: dict | None, default: str) -> str:
    return (user or {}).get("display_name") or default


def _summary(issue: dict, indent: str = "") -> str:
    return (
        f"{indent}State: {issue.get('state')}\n"
        f"{indent}Kind: {issue.get('kind')}\n"
        f"{indent}Priority: {issue.get('priority')}\n"
        f"{indent}Reporter: {_name(issue.get('reporter'), 'Unknown')}\n"
        f"{indent}Assignee: {_name(issue.get('assignee'), 'Unassigned')}\n"
        f"{indent}Created: {issue.get('created_on')}"
    )


async def handle_get_issues(args: dict) -> ToolResponse:
    parsed = GetIssuesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"/repositories/{parsed.workspace}/{parsed.repo_slug}/issues"),
        {"state": parsed.state, "kind": parsed.kind, "page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    issue_list = "\n\n".join(
        f"- #{issue.get('id')}: {issue.get('title')}\n{_summary(issue, '  ')}"
        for issue in data.get("values", [])
    )
    return ToolResponse(
        f"Issues for {parsed.workspace}/{parsed.repo_slug} ({data.get('size', 0)} total):\n\n{issue_list}"
    )


async def handle_get_issue(args: dict) -> ToolResponse:
    parsed = GetIssueArgs.model_validate(args)
    issue = await execute_json_request(
        build_api_url(
            f"/repositories/{parsed.workspace}/{parsed.repo_slug}/issues/{parsed.issue_id}"
        )
    )

    content = (issue.get("content") or {}).get("raw") or "No content"
    return ToolResponse(
        f"Issue #{issue.get('id')}: {issue.get('title')}\n"
        f"{_summary(issue)}\n"
        f"Updated: {issue.get('updated_on')}\n"
        f"Content:\n{content}"
    )

"""Commit tools: details, build statuses, merge base and file history."""

from urllib.parse import quote

from ..client import add_query_params, build_api_url, execute_json_request
from ..models import ToolResponse
from ..schemas import GetCommitArgs, GetCommitStatusesArgs, GetFileHistoryArgs, GetMergeBaseArgs


def _author_name(commit: dict) -> str:
    author = commit.get("author") or {}
    return (author.get("user") or {}).get("display_name") or author.get("raw") or "Unknown"


def format_commit_summary(commit: dict) -> str:
    """Short hash, first message line, author and date."""
    message = (commit.get("message") or "").splitlines()
    return (
        f"- {commit.get('hash', '')[:8]}: {message[0] if message else '(no message)'}\n"
        f"  Author: {_author_name(commit)}\n"
        f"  Date: {commit.get('date')}"
    )


def format_build_status(status: dict) -> str:
    text = f"[{status.get('state')}] {status.get('name')}\n  Key: {status.get('key')}\n"
    if status.get("description"):
        text += f"  Description: {status['description']}\n"
    if status.get("url"):
        text += f"  URL: {status['url']}\n"
    return text + f"  Updated: {status.get('updated_on') or status.get('created_on')}"


def _commit_path(workspace: str, repo_slug: str, commit: str) -> str:
    return f"/repositories/{workspace}/{repo_slug}/commit/{quote(commit, safe='')}"


async def handle_get_commit(args: dict) -> ToolResponse:
    parsed = GetCommitArgs.model_validate(args)
    data = await execute_json_request(
        build_api_url(_commit_path(parsed.workspace, parsed.repo_slug, parsed.commit))
    )

    parents = ", ".join(p.get("hash", "")[:8] for p in data.get("parents") or []) or "None"
    repository = (data.get("repository") or {}).get("full_name") or (
        f"{parsed.workspace}/{parsed.repo_slug}"
    )
    return ToolResponse(
        f"Commit: {data.get('hash')}\n"
        f"Message: {(data.get('message') or '').strip()}\n"
        f"Author: {_author_name(data)}\n"
        f"Date: {data.get('date')}\n"
        f"Parents: {parents}\n"
        f"Repository: {repository}"
    )


async def handle_get_commit_statuses(args: dict) -> ToolResponse:
    parsed = GetCommitStatusesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"{_commit_path(parsed.workspace, parsed.repo_slug, parsed.commit)}/statuses"),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    statuses = data.get("values") or []
    short = parsed.commit[:8]
    if not statuses:
        return ToolResponse(f"No build statuses found for commit {short}.")
    return ToolResponse(
        f"Build statuses for commit {short} ({len(statuses)} total):\n\n"
        + "\n\n".join(format_build_status(s) for s in statuses)
    )


async def handle_get_merge_base(args: dict) -> ToolResponse:
    parsed = GetMergeBaseArgs.model_validate(args)
    data = await execute_json_request(
        build_api_url(
            f"/repositories/{parsed.workspace}/{parsed.repo_slug}/merge-base/"
            f"{quote(parsed.revspec, safe='.')}"
        )
    )

    text = f"Merge base for {parsed.revspec}:\nCommit: {data.get('hash')}"
    if data.get("message"):
        text += f"\nMessage: {data['message'].strip()}"
    if data.get("date"):
        text += f"\nDate: {data['date']}"
    if data.get("author"):
        text += f"\nAuthor: {_author_name(data)}"
    return ToolResponse(text)


async def handle_get_file_history(args: dict) -> ToolResponse:
    parsed = GetFileHistoryArgs.model_validate(args)
    path = "/".join(quote(segment, safe="") for segment in parsed.path.strip("/").split("/"))
    url = add_query_params(
        build_api_url(
            f"/repositories/{parsed.workspace}/{parsed.repo_slug}/filehistory/"
            f"{quote(parsed.commit, safe='')}/{path}"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    entries = data.get("values") or []
    if not entries:
        return ToolResponse(f"No history found for file {parsed.path} at {parsed.commit}.")

    history = []
    for entry in entries:
        text = format_commit_summary(entry.get("commit") or {})
        if entry.get("size") is not None:
            text += f"\n  File size: {entry['size']} bytes"
        history.append(text)
    return ToolResponse(
        f"File history for {parsed.path} (from {parsed.commit}):\n"
        f"{len(entries)} commits found:\n\n" + "\n\n".join(history)
    )

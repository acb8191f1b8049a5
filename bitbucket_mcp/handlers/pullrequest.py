"""Pull request tools."""

from ..client import add_query_params, build_api_url, execute_json_request, fetch_all_pages
from ..models import MAX_PAGE_SIZE, ToolResponse
from ..schemas import (
    GetCommentThreadArgs,
    GetPullRequestActivityArgs,
    GetPullRequestCommentArgs,
    GetPullRequestCommentsArgs,
    GetPullRequestCommitsArgs,
    GetPullRequestStatusesArgs,
    GetPullRequestsArgs,
    PullRequestArgs,
)
from .commit import format_build_status, format_commit_summary


def _pr_path(workspace: str, repo_slug: str, pull_request_id: int | None = None) -> str:
    path = f"/repositories/{workspace}/{repo_slug}/pullrequests"
    if pull_request_id is not None:
        path += f"/{pull_request_id}"
    return path


def _display_name(entity: dict | None) -> str:
    return (entity or {}).get("display_name") or "Unknown"


def _branches(pr: dict) -> str:
    source = ((pr.get("source") or {}).get("branch") or {}).get("name")
    destination = ((pr.get("destination") or {}).get("branch") or {}).get("name")
    return f"{source} -> {destination}"


async def handle_get_pull_requests(args: dict) -> ToolResponse:
    parsed = GetPullRequestsArgs.model_validate(args)
    url = add_query_params(
        build_api_url(_pr_path(parsed.workspace, parsed.repo_slug)),
        {"state": parsed.state, "page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    pr_list = "\n\n".join(
        f"- #{pr.get('id')}: {pr.get('title')}\n"
        f"  Author: {_display_name(pr.get('author'))}\n"
        f"  State: {pr.get('state')}\n"
        f"  Created: {pr.get('created_on')}\n"
        f"  Source: {_branches(pr)}"
        for pr in data.get("values", [])
    )
    return ToolResponse(
        f"Pull requests for {parsed.workspace}/{parsed.repo_slug} "
        f"({data.get('size', 0)} total):\n\n{pr_list}"
    )


async def handle_get_pull_request(args: dict) -> ToolResponse:
    parsed = PullRequestArgs.model_validate(args)
    url = build_api_url(_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id))
    pr = await execute_json_request(url)

    reviewers = ", ".join(_display_name(r) for r in pr.get("reviewers") or []) or "None"
    return ToolResponse(
        f"Pull Request #{pr.get('id')}: {pr.get('title')}\n"
        f"Author: {_display_name(pr.get('author'))}\n"
        f"State: {pr.get('state')}\n"
        f"Created: {pr.get('created_on')}\n"
        f"Updated: {pr.get('updated_on')}\n"
        f"Source: {_branches(pr)}\n"
        f"Description:\n{pr.get('description') or 'No description'}\n"
        f"Reviewers: {reviewers}"
    )


def _inline_location(comment: dict) -> str:
    inline = comment.get("inline")
    if not inline:
        return ""
    location = f"File: {inline.get('path')}"
    line = inline.get("to") or inline.get("from")
    if line:
        location += f", Line: {line}"
    return location


def _raw_content(comment: dict) -> str:
    return (comment.get("content") or {}).get("raw") or "No content"


async def handle_get_pull_request_comments(args: dict) -> ToolResponse:
    parsed = GetPullRequestCommentsArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}/comments"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    entries = []
    for comment in data.get("values", []):
        entry = (
            f"- {_display_name(comment.get('user'))} ({comment.get('created_on')}):\n"
            f"  {_raw_content(comment)}"
        )
        location = _inline_location(comment)
        if location:
            entry += f"\n  {location}"
        entries.append(entry)

    return ToolResponse(
        f"Comments for PR #{parsed.pull_request_id} ({data.get('size', 0)} total):\n\n"
        + "\n\n".join(entries)
    )


async def handle_get_pull_request_comment(args: dict) -> ToolResponse:
    parsed = GetPullRequestCommentArgs.model_validate(args)
    comment = await execute_json_request(
        build_api_url(
            f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}"
            f"/comments/{parsed.comment_id}"
        )
    )

    text = (
        f"Comment #{comment.get('id')} on PR #{parsed.pull_request_id}:\n\n"
        f"Author: {_display_name(comment.get('user'))}\n"
        f"Created: {comment.get('created_on')}\n"
    )
    if comment.get("updated_on") and comment["updated_on"] != comment.get("created_on"):
        text += f"Updated: {comment['updated_on']}\n"

    inline = comment.get("inline")
    if inline:
        text += f"\nInline Comment:\n  File: {inline.get('path')}\n"
        if inline.get("to"):
            text += f"  Line: {inline['to']}\n"
        if inline.get("from") and inline["from"] != inline.get("to"):
            text += f"  From Line: {inline['from']}\n"

    if comment.get("parent"):
        text += f"\nReply to Comment #{comment['parent'].get('id')}\n"

    text += f"\nContent:\n{_raw_content(comment)}"
    if comment.get("deleted"):
        text += "\n\n[This comment has been deleted]"
    return ToolResponse(text)


def _format_thread_comment(comment: dict, depth: int) -> str:
    indent = "  " * depth
    text = (
        f"{indent}Comment #{comment.get('id')}\n"
        f"{indent}Author: {_display_name(comment.get('user'))}\n"
        f"{indent}Created: {comment.get('created_on')}\n"
    )
    location = _inline_location(comment)
    if location:
        text += f"{indent}{location}\n"
    text += f"{indent}Content:\n{indent}{_raw_content(comment)}\n"
    if comment.get("deleted"):
        text += f"{indent}[This comment has been deleted]\n"
    return text


def collect_replies(comments: list[dict], root_id: int) -> list[tuple[dict, int]]:
    """Depth-first replies to ``root_id`` as (comment, depth) pairs; direct replies are depth 1."""
    children: dict[int, list[dict]] = {}
    for comment in comments:
        parent_id = (comment.get("parent") or {}).get("id")
        if parent_id is not None:
            children.setdefault(parent_id, []).append(comment)

    replies = []
    seen = {root_id}
    stack = [(c, 1) for c in reversed(children.get(root_id, []))]
    while stack:
        comment, depth = stack.pop()
        if comment.get("id") in seen:
            continue
        seen.add(comment.get("id"))
        replies.append((comment, depth))
        stack.extend((c, depth + 1) for c in reversed(children.get(comment.get("id"), [])))
    return replies


async def handle_get_comment_thread(args: dict) -> ToolResponse:
    parsed = GetCommentThreadArgs.model_validate(args)
    comments_path = f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}/comments"

    root = await execute_json_request(build_api_url(f"{comments_path}/{parsed.comment_id}"))
    # Replies can sit on any page of the listing.
    all_comments = await fetch_all_pages(
        add_query_params(build_api_url(comments_path), {"pagelen": MAX_PAGE_SIZE})
    )
    replies = collect_replies(all_comments, parsed.comment_id)

    text = (
        f"Comment Thread for #{parsed.comment_id} on PR #{parsed.pull_request_id}:\n\n"
        "=== ROOT COMMENT ===\n" + _format_thread_comment(root, 0)
    )
    if replies:
        text += f"\n=== REPLIES ({len(replies)}) ===\n"
        for reply, depth in replies:
            text += "\n" + _format_thread_comment(reply, depth)
    else:
        text += "\nNo replies to this comment."
    return ToolResponse(text)


def format_activity(activity: dict) -> str:
    user = (activity.get("user") or {}).get("display_name") or "System"
    update = activity.get("update")
    date = activity.get("created_on") or (update or {}).get("date") or "Unknown date"

    text = f"- {user} ({date}):\n  Action: {activity.get('action') or 'Activity'}"
    if activity.get("comment"):
        text += f"\n  Comment: {_raw_content(activity['comment'])}"
    if activity.get("approval"):
        text += f"\n  Approval: {activity['approval'].get('state') or 'Unknown state'}"
    if update:
        author = (update.get("author") or {}).get("display_name") or "Unknown"
        text += f"\n  Update: {update.get('state') or 'Updated'} by {author}"
        if update.get("title"):
            text += f"\n  Title changed to: {update['title']}"
    return text


async def handle_get_pull_request_activity(args: dict) -> ToolResponse:
    parsed = GetPullRequestActivityArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}/activity"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    activities = data.get("values") or []
    return ToolResponse(
        f"Activity for PR #{parsed.pull_request_id} ({data.get('size', len(activities))} total):\n\n"
        + "\n\n".join(format_activity(a) for a in activities)
    )


async def handle_get_pull_request_commits(args: dict) -> ToolResponse:
    parsed = GetPullRequestCommitsArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}/commits"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    commits = data.get("values") or []
    if not commits:
        return ToolResponse(f"No commits found for PR #{parsed.pull_request_id}.")
    return ToolResponse(
        f"Commits for PR #{parsed.pull_request_id} in {parsed.workspace}/{parsed.repo_slug} "
        f"({len(commits)} commits):\n\n" + "\n\n".join(format_commit_summary(c) for c in commits)
    )


async def handle_get_pull_request_statuses(args: dict) -> ToolResponse:
    parsed = GetPullRequestStatusesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"{_pr_path(parsed.workspace, parsed.repo_slug, parsed.pull_request_id)}/statuses"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    statuses = data.get("values") or []
    if not statuses:
        return ToolResponse(f"No build statuses found for PR #{parsed.pull_request_id}.")
    return ToolResponse(
        f"Build statuses for PR #{parsed.pull_request_id} ({len(statuses)} total):\n\n"
        + "\n\n".join(format_build_status(s) for s in statuses)
    )

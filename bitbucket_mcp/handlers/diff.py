"""Diff tools. Raw diffs come back as text/plain; diffstat is JSON."""

from urllib.parse import quote

from ..client import add_query_params, build_api_url, execute_json_request, execute_text_request
from ..models import ToolResponse
from ..schemas import GetDiffArgs, GetDiffstatArgs, GetPullRequestDiffArgs, GetPullRequestDiffstatArgs


def _spec_params(parsed: GetDiffstatArgs) -> dict:
    # False flags are left off the query entirely.
    return {
        "path": parsed.path or None,
        "ignore_whitespace": parsed.ignore_whitespace or None,
        "topic": parsed.topic or None,
    }


def _spec_path(parsed: GetDiffstatArgs, kind: str) -> str:
    return f"/repositories/{parsed.workspace}/{parsed.repo_slug}/{kind}/{quote(parsed.spec, safe='.')}"


async def handle_get_pull_request_diff(args: dict) -> ToolResponse:
    parsed = GetPullRequestDiffArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"/repositories/{parsed.workspace}/{parsed.repo_slug}"
            f"/pullrequests/{parsed.pull_request_id}/diff"
        ),
        {"context": parsed.context, "path": parsed.path or None},
    )
    diff = await execute_text_request(url)

    if not diff.strip():
        return ToolResponse(f"No changes found in pull request #{parsed.pull_request_id}.")
    return ToolResponse(
        f"Diff for PR #{parsed.pull_request_id} in {parsed.workspace}/{parsed.repo_slug}:\n\n{diff}"
    )


async def handle_get_diff(args: dict) -> ToolResponse:
    parsed = GetDiffArgs.model_validate(args)
    url = add_query_params(
        build_api_url(_spec_path(parsed, "diff")),
        {"context": parsed.context, **_spec_params(parsed)},
    )
    diff = await execute_text_request(url)

    if not diff.strip():
        return ToolResponse(f"No changes found for {parsed.spec}.")
    return ToolResponse(f"Diff for {parsed.spec} in {parsed.workspace}/{parsed.repo_slug}:\n\n{diff}")


def format_diffstat_entry(entry: dict) -> str:
    status = (entry.get("status") or "").upper()
    added = entry.get("lines_added", 0)
    removed = entry.get("lines_removed", 0)
    old_path = (entry.get("old") or {}).get("path")
    new_path = (entry.get("new") or {}).get("path")

    if entry.get("status") == "renamed":
        return f"  {status}: {old_path or '(none)'} -> {new_path or '(none)'}  (+{added} -{removed})"
    return f"  {status}: {new_path or old_path or '(unknown)'}  (+{added} -{removed})"


def summarize_diffstat(title: str, entries: list[dict]) -> str:
    total_added = sum(e.get("lines_added", 0) for e in entries)
    total_removed = sum(e.get("lines_removed", 0) for e in entries)
    return (
        f"{title} ({len(entries)} files changed, +{total_added} -{total_removed}):\n\n"
        + "\n".join(format_diffstat_entry(e) for e in entries)
    )


async def handle_get_pull_request_diffstat(args: dict) -> ToolResponse:
    parsed = GetPullRequestDiffstatArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"/repositories/{parsed.workspace}/{parsed.repo_slug}"
            f"/pullrequests/{parsed.pull_request_id}/diffstat"
        ),
        {"path": parsed.path or None},
    )
    data = await execute_json_request(url)

    entries = data.get("values") or []
    if not entries:
        return ToolResponse(f"No changes found in pull request #{parsed.pull_request_id}.")
    return ToolResponse(summarize_diffstat(f"Diffstat for PR #{parsed.pull_request_id}", entries))


async def handle_get_diffstat(args: dict) -> ToolResponse:
    parsed = GetDiffstatArgs.model_validate(args)
    url = add_query_params(build_api_url(_spec_path(parsed, "diffstat")), _spec_params(parsed))
    data = await execute_json_request(url)

    entries = data.get("values") or []
    if not entries:
        return ToolResponse(f"No changes found for {parsed.spec}.")
    return ToolResponse(
        summarize_diffstat(
            f"Diffstat for {parsed.spec} in {parsed.workspace}/{parsed.repo_slug}", entries
        )
    )

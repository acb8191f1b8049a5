"""Repository tools: metadata, branches, commits, browsing and file content."""

import logging
from urllib.parse import quote

from ..client import add_query_params, build_api_url, execute_json_request, execute_text_request
from ..errors import BitbucketApiError, NotFoundError
from ..models import (
    DEFAULT_BROWSE_ITEMS,
    DEFAULT_FILE_LINES,
    MAX_BROWSE_ITEMS,
    MAX_FILE_LINES,
    ToolResponse,
)
from ..schemas import (
    BrowseRepositoryArgs,
    GetBranchArgs,
    GetBranchesArgs,
    GetCommitsArgs,
    GetFileContentArgs,
    GetRepositoryArgs,
    GetTagArgs,
    GetTagsArgs,
    ListRepositoriesArgs,
)

logger = logging.getLogger(__name__)


def _repo_path(workspace: str, repo_slug: str) -> str:
    return f"/repositories/{workspace}/{repo_slug}"


def _encode_path(path: str) -> str:
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def _first_line(message: str | None) -> str:
    return message.splitlines()[0] if message else ""


def _author_name(commit: dict) -> str:
    author = commit.get("author") or {}
    return (author.get("user") or {}).get("display_name") or author.get("raw") or "Unknown"


async def _default_branch(workspace: str, repo_slug: str) -> str:
    try:
        repo = await execute_json_request(build_api_url(_repo_path(workspace, repo_slug)))
    except BitbucketApiError as e:
        logger.debug("Could not read main branch of %s/%s: %s", workspace, repo_slug, e)
        return "main"
    return (repo.get("mainbranch") or {}).get("name") or "main"


async def resolve_ref_to_commit(workspace: str, repo_slug: str, ref: str) -> str | None:
    """Resolve a branch, tag, or SHA to a commit hash.

    ``/src/{ref}/{path}`` breaks on refs containing slashes, so paths are
    fetched by hash. Returns None when the ref cannot be resolved; the caller
    then tries the ref directly.
    """
    url = build_api_url(f"{_repo_path(workspace, repo_slug)}/commit/{quote(ref, safe='')}")
    try:
        commit = await execute_json_request(url)
    except BitbucketApiError as e:
        logger.debug("Could not resolve ref %r: %s", ref, e)
        return None
    return commit.get("hash")


async def handle_get_repository(args: dict) -> ToolResponse:
    parsed = GetRepositoryArgs.model_validate(args)
    data = await execute_json_request(build_api_url(_repo_path(parsed.workspace, parsed.repo_slug)))

    size = data.get("size")
    return ToolResponse(
        f"Repository: {data.get('full_name')}\n"
        f"Description: {data.get('description') or 'No description'}\n"
        f"Language: {data.get('language') or 'Not specified'}\n"
        f"Private: {data.get('is_private')}\n"
        f"Created: {data.get('created_on')}\n"
        f"Updated: {data.get('updated_on')}\n"
        f"Size: {f'{size} bytes' if size else 'Unknown'}\n"
        f"Main branch: {(data.get('mainbranch') or {}).get('name') or 'Unknown'}\n"
        f"Website: {data.get('website') or 'None'}"
    )


async def handle_list_repositories(args: dict) -> ToolResponse:
    parsed = ListRepositoriesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"/repositories/{parsed.workspace}"),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    repo_list = "\n\n".join(
        f"- {repo.get('full_name')} ({repo.get('language') or 'Unknown'})\n"
        f"  {repo.get('description') or 'No description'}\n"
        f"  Private: {repo.get('is_private')}, Updated: {repo.get('updated_on')}"
        for repo in data.get("values", [])
    )
    return ToolResponse(
        f"Repositories in {parsed.workspace} ({data.get('size', 0)} total):\n\n{repo_list}"
    )


async def handle_get_branches(args: dict) -> ToolResponse:
    parsed = GetBranchesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"{_repo_path(parsed.workspace, parsed.repo_slug)}/refs/branches"),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    branch_list = "\n\n".join(
        f"- {branch.get('name')}\n"
        f"  Last commit: {(branch.get('target') or {}).get('hash', '')[:8]}\n"
        f"  Date: {(branch.get('target') or {}).get('date')}"
        for branch in data.get("values", [])
    )
    return ToolResponse(
        f"Branches for {parsed.workspace}/{parsed.repo_slug} "
        f"({data.get('size', 0)} total):\n\n{branch_list}"
    )


async def handle_get_branch(args: dict) -> ToolResponse:
    parsed = GetBranchArgs.model_validate(args)
    branch = await execute_json_request(
        build_api_url(
            f"{_repo_path(parsed.workspace, parsed.repo_slug)}/refs/branches/{quote(parsed.name, safe='')}"
        )
    )

    target = branch.get("target") or {}
    return ToolResponse(
        f"Branch: {branch.get('name')}\n"
        f"Latest commit: {target.get('hash')}\n"
        f"Message: {_first_line(target.get('message')) or '(no message)'}\n"
        f"Author: {_author_name(target)}\n"
        f"Date: {target.get('date') or 'Unknown'}"
    )


async def handle_get_tags(args: dict) -> ToolResponse:
    parsed = GetTagsArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"{_repo_path(parsed.workspace, parsed.repo_slug)}/refs/tags"),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    tags = data.get("values") or []
    if not tags:
        return ToolResponse(f"No tags found for {parsed.workspace}/{parsed.repo_slug}.")

    tag_list = "\n\n".join(
        f"- {tag.get('name')}\n"
        f"  Commit: {(tag.get('target') or {}).get('hash', '')[:8]}\n"
        f"  Date: {tag.get('date') or (tag.get('target') or {}).get('date') or 'Unknown'}"
        for tag in tags
    )
    return ToolResponse(
        f"Tags for {parsed.workspace}/{parsed.repo_slug} "
        f"({data.get('size', len(tags))} total):\n\n{tag_list}"
    )


async def handle_get_tag(args: dict) -> ToolResponse:
    parsed = GetTagArgs.model_validate(args)
    tag = await execute_json_request(
        build_api_url(
            f"{_repo_path(parsed.workspace, parsed.repo_slug)}/refs/tags/{quote(parsed.name, safe='')}"
        )
    )

    target = tag.get("target") or {}
    text = (
        f"Tag: {tag.get('name')}\n"
        f"Commit: {target.get('hash')}\n"
        f"Date: {tag.get('date') or target.get('date') or 'Unknown'}"
    )
    # Lightweight tags have no tagger or message of their own.
    if tag.get("tagger"):
        text += f"\nTagger: {_author_name({'author': tag['tagger']})}"
    if tag.get("message"):
        text += f"\nMessage: {tag['message'].strip()}"
    return ToolResponse(text)


async def handle_get_commits(args: dict) -> ToolResponse:
    parsed = GetCommitsArgs.model_validate(args)
    endpoint = f"{_repo_path(parsed.workspace, parsed.repo_slug)}/commits"
    if parsed.branch:
        endpoint += f"/{quote(parsed.branch, safe='')}"
    url = add_query_params(build_api_url(endpoint), {"page": parsed.page, "pagelen": parsed.pagelen})
    data = await execute_json_request(url)

    commit_list = "\n\n".join(
        f"- {commit.get('hash', '')[:8]}: {_first_line(commit.get('message'))}\n"
        f"  Author: {_author_name(commit)}\n"
        f"  Date: {commit.get('date')}"
        for commit in data.get("values", [])
    )
    branch = f" ({parsed.branch})" if parsed.branch else ""
    total = data.get("size", len(data.get("values", [])))
    return ToolResponse(
        f"Commits for {parsed.workspace}/{parsed.repo_slug}{branch} ({total} total):\n\n{commit_list}"
    )


async def handle_browse_repository(args: dict) -> ToolResponse:
    parsed = BrowseRepositoryArgs.model_validate(args)
    ref = parsed.ref or await _default_branch(parsed.workspace, parsed.repo_slug)
    path = (parsed.path or "").strip("/")
    repo = _repo_path(parsed.workspace, parsed.repo_slug)

    if path:
        commit = await resolve_ref_to_commit(parsed.workspace, parsed.repo_slug, ref)
        revision = commit or quote(ref, safe="")
        url = build_api_url(f"{repo}/src/{revision}/{_encode_path(path)}/")
    else:
        url = add_query_params(build_api_url(f"{repo}/src/"), {"at": ref})

    try:
        data = await execute_json_request(url)
    except NotFoundError as e:
        raise NotFoundError(
            "branch",
            detail=(
                f"Branch, tag, or commit '{ref}' not found in repository "
                f"{parsed.workspace}/{parsed.repo_slug}"
            ),
            suggestion=(
                "Try specifying a different branch with the 'ref' parameter. Common branch "
                "names are 'main', 'master', or 'develop'. Use bb_get_branches to list "
                "available branches."
            ),
        ) from e

    limit = min(parsed.limit, MAX_BROWSE_ITEMS) if parsed.limit else DEFAULT_BROWSE_ITEMS
    values = data.get("values", [])
    items = values[:limit]

    lines = []
    for item in items:
        kind = "dir " if item.get("type") == "commit_directory" else "file"
        size = f" ({item['size']} bytes)" if item.get("size") else ""
        lines.append(f"[{kind}] {item.get('path')}{size}")

    return ToolResponse(
        f"Repository: {parsed.workspace}/{parsed.repo_slug}\n"
        f"Path: /{path}\n"
        f"Ref: {ref}\n"
        f"Items ({len(items)} of {data.get('size') or len(values)} total):\n\n"
        + "\n".join(lines)
    )


async def handle_get_file_content(args: dict) -> ToolResponse:
    parsed = GetFileContentArgs.model_validate(args)
    ref = parsed.ref or await _default_branch(parsed.workspace, parsed.repo_slug)
    commit = await resolve_ref_to_commit(parsed.workspace, parsed.repo_slug, ref)
    revision = commit or quote(ref, safe="")
    url = build_api_url(
        f"{_repo_path(parsed.workspace, parsed.repo_slug)}/src/{revision}/"
        f"{_encode_path(parsed.file_path)}"
    )
    content = await execute_text_request(url)

    lines = content.split("\n")
    start = parsed.start or 1
    limit = min(parsed.limit, MAX_FILE_LINES) if parsed.limit else DEFAULT_FILE_LINES
    end = min(start + limit - 1, len(lines))
    window = lines[start - 1 : end]

    numbered = "\n".join(f"{start + i}: {line}" for i, line in enumerate(window))
    return ToolResponse(
        f"File: {parsed.file_path} (lines {start}-{end} of {len(lines)})\n"
        f"Repository: {parsed.workspace}/{parsed.repo_slug}\n"
        f"Ref: {ref}\n\n"
        f"{numbered}"
    )

"""Search tools: repositories by name or description, and code content."""

from ..client import add_query_params, build_api_url, execute_json_request
from ..models import MAX_PAGE_SIZE, ToolResponse
from ..schemas import SearchCodeArgs, SearchRepositoriesArgs


def build_repository_query(query: str) -> str:
    """BBQL filter matching ``query`` against name or description."""
    escaped = query.replace('"', '\\"')
    return f'name ~ "{escaped}" OR description ~ "{escaped}"'


def build_code_query(parsed: SearchCodeArgs) -> str:
    query = parsed.search_query
    if parsed.repo_slug:
        query += f" repo:{parsed.repo_slug}"
    if parsed.language:
        query += f" language:{parsed.language}"
    if parsed.extension:
        query += f" extension:{parsed.extension}"
    return query


def format_code_match(result: dict) -> str:
    """One file's hits, with matched segments in **bold**."""
    lines = []
    for match in result.get("content_matches") or []:
        for line in match.get("lines") or []:
            text = "".join(
                f"**{seg.get('text', '')}**" if seg.get("match") else seg.get("text", "")
                for seg in line.get("segments") or []
            )
            lines.append(f"    Line {line.get('line')}: {text}")
    path = (result.get("file") or {}).get("path")
    header = f"{path} ({result.get('content_match_count', 0)} matches)"
    return "\n".join([header, *lines])


async def handle_search_repositories(args: dict) -> ToolResponse:
    parsed = SearchRepositoriesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"/repositories/{parsed.workspace}"),
        {
            "q": build_repository_query(parsed.query),
            "sort": parsed.sort,
            "page": parsed.page,
            "pagelen": parsed.pagelen or MAX_PAGE_SIZE,
        },
    )
    data = await execute_json_request(url)

    repos = data.get("values") or []
    repo_list = "\n\n".join(
        f"- {repo.get('full_name')} ({repo.get('language') or 'Unknown'})\n"
        f"  {repo.get('description') or 'No description'}\n"
        f"  Private: {repo.get('is_private')}, Updated: {repo.get('updated_on')}"
        for repo in repos
    )
    total = f" of {data['size']} total matches" if data.get("size") is not None else ""
    more = " (more results available, use page parameter)" if data.get("next") else ""
    return ToolResponse(
        f'Search results for "{parsed.query}" in {parsed.workspace} '
        f"({len(repos)} results{total}{more}):\n\n"
        f"{repo_list or 'No repositories found matching the search query.'}"
    )


async def handle_search_code(args: dict) -> ToolResponse:
    parsed = SearchCodeArgs.model_validate(args)
    url = add_query_params(
        build_api_url(f"/workspaces/{parsed.workspace}/search/code"),
        {"search_query": build_code_query(parsed), "page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    results = data.get("values") or []
    return ToolResponse(
        f'Code search results for "{parsed.search_query}" in {parsed.workspace} '
        f"({len(results)} results):\n\n" + "\n\n".join(format_code_match(r) for r in results)
    )

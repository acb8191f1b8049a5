"""Pipeline tools."""

from ..client import add_query_params, build_api_url, execute_json_request, execute_text_request
from ..models import MAX_LOG_LENGTH, ToolResponse
from ..schemas import GetPipelineArgs, GetPipelineStepLogArgs, GetPipelineStepsArgs, ListPipelinesArgs


def normalize_uuid(uuid: str) -> str:
    """Bitbucket pipeline UUIDs must be wrapped in braces in URLs."""
    uuid = uuid.strip()
    if uuid.startswith("{") and uuid.endswith("}"):
        return uuid
    return f"{{{uuid.strip('{}')}}}"


def format_state(state: dict | None) -> str:
    """Most specific of result, stage and state name, e.g. ``SUCCESSFUL``."""
    state = state or {}
    name = (
        (state.get("result") or {}).get("name")
        or (state.get("stage") or {}).get("name")
        or state.get("name")
    )
    return (name or "UNKNOWN").upper()


def format_duration(seconds: int | None) -> str:
    if seconds is None:
        return "N/A"
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {secs}s"


def _pipelines_path(workspace: str, repo_slug: str) -> str:
    return f"/repositories/{workspace}/{repo_slug}/pipelines"


async def handle_list_pipelines(args: dict) -> ToolResponse:
    parsed = ListPipelinesArgs.model_validate(args)
    url = add_query_params(
        build_api_url(_pipelines_path(parsed.workspace, parsed.repo_slug)),
        {"page": parsed.page, "pagelen": parsed.pagelen, "sort": "-created_on"},
    )
    data = await execute_json_request(url)

    pipelines = data.get("values") or []
    if not pipelines:
        return ToolResponse(f"No pipelines found for {parsed.workspace}/{parsed.repo_slug}.")

    pipeline_list = "\n\n".join(
        f"- #{p.get('build_number')} {format_state(p.get('state'))}\n"
        f"  Branch: {(p.get('target') or {}).get('ref_name') or 'N/A'}\n"
        f"  Trigger: {(p.get('trigger') or {}).get('name') or 'Unknown'}\n"
        f"  Duration: {format_duration(p.get('duration_in_seconds'))}\n"
        f"  Created: {p.get('created_on')}\n"
        f"  UUID: {p.get('uuid')}"
        for p in pipelines
    )
    return ToolResponse(
        f"Pipelines for {parsed.workspace}/{parsed.repo_slug} "
        f"({data.get('size', len(pipelines))} total):\n\n{pipeline_list}"
    )


async def handle_get_pipeline(args: dict) -> ToolResponse:
    parsed = GetPipelineArgs.model_validate(args)
    data = await execute_json_request(
        build_api_url(
            f"{_pipelines_path(parsed.workspace, parsed.repo_slug)}/{normalize_uuid(parsed.pipeline_uuid)}"
        )
    )

    target = data.get("target") or {}
    commit = target.get("commit") or {}
    message = (commit.get("message") or "").splitlines()
    commit_line = (commit.get("hash") or "N/A")[:8]
    if message:
        commit_line += f" ({message[0]})"

    text = (
        f"Pipeline #{data.get('build_number')}\n"
        f"Status: {format_state(data.get('state'))}\n"
        f"Branch: {target.get('ref_name') or 'N/A'}\n"
        f"Commit: {commit_line}\n"
        f"Trigger: {(data.get('trigger') or {}).get('name') or 'Unknown'}\n"
        f"Creator: {(data.get('creator') or {}).get('display_name') or 'Unknown'}\n"
        f"Duration: {format_duration(data.get('duration_in_seconds'))}\n"
        f"Created: {data.get('created_on')}\n"
    )
    if data.get("completed_on"):
        text += f"Completed: {data['completed_on']}\n"
    return ToolResponse(text + f"UUID: {data.get('uuid')}")


async def handle_get_pipeline_steps(args: dict) -> ToolResponse:
    parsed = GetPipelineStepsArgs.model_validate(args)
    url = add_query_params(
        build_api_url(
            f"{_pipelines_path(parsed.workspace, parsed.repo_slug)}/"
            f"{normalize_uuid(parsed.pipeline_uuid)}/steps"
        ),
        {"page": parsed.page, "pagelen": parsed.pagelen},
    )
    data = await execute_json_request(url)

    steps = data.get("values") or []
    if not steps:
        return ToolResponse(f"No steps found for pipeline {parsed.pipeline_uuid}.")

    entries = []
    for index, step in enumerate(steps, start=1):
        text = (
            f"- {step.get('name') or f'Step {index}'}: {format_state(step.get('state'))}\n"
            f"  Image: {(step.get('image') or {}).get('name') or 'default'}\n"
            f"  Duration: {format_duration(step.get('duration_in_seconds'))}\n"
        )
        if step.get("started_on"):
            text += f"  Started: {step['started_on']}\n"
        if step.get("completed_on"):
            text += f"  Completed: {step['completed_on']}\n"
        entries.append(text + f"  UUID: {step.get('uuid')}")
    return ToolResponse(f"Pipeline steps ({len(steps)} total):\n\n" + "\n\n".join(entries))


async def handle_get_pipeline_step_log(args: dict) -> ToolResponse:
    parsed = GetPipelineStepLogArgs.model_validate(args)
    url = build_api_url(
        f"{_pipelines_path(parsed.workspace, parsed.repo_slug)}/"
        f"{normalize_uuid(parsed.pipeline_uuid)}/steps/{normalize_uuid(parsed.step_uuid)}/log"
    )
    log = await execute_text_request(url)

    if not log.strip():
        return ToolResponse(f"No log output found for step {parsed.step_uuid}.")

    truncated = len(log) > MAX_LOG_LENGTH
    if truncated:
        log = log[-MAX_LOG_LENGTH:]
    note = " (truncated to last 50K chars)" if truncated else ""
    return ToolResponse(f"Pipeline step log{note}:\n\n{log}")

"""Tool registry: names, argument schemas and handlers, plus the error boundary."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mcp import types
from pydantic import BaseModel, ValidationError

from . import schemas
from .errors import BitbucketApiError
from .handlers import commit, diff, issue, pipeline, pullrequest, repository, search, workspace
from .models import ToolResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[dict], Awaitable[ToolResponse]]

    def definition(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.args_model.model_json_schema(),
        )


_SPECS = [
    # Repository
    ToolSpec(
        "bb_get_repository",
        "Get detailed information about a specific repository",
        schemas.GetRepositoryArgs,
        repository.handle_get_repository,
    ),
    ToolSpec(
        "bb_list_repositories",
        "List repositories in a workspace",
        schemas.ListRepositoriesArgs,
        repository.handle_list_repositories,
    ),
    ToolSpec(
        "bb_get_branches",
        "Get branches for a repository",
        schemas.GetBranchesArgs,
        repository.handle_get_branches,
    ),
    ToolSpec(
        "bb_get_branch",
        "Get details of a single branch, including its latest commit",
        schemas.GetBranchArgs,
        repository.handle_get_branch,
    ),
    ToolSpec(
        "bb_get_tags",
        "List tags for a repository",
        schemas.GetTagsArgs,
        repository.handle_get_tags,
    ),
    ToolSpec(
        "bb_get_tag",
        "Get details of a single tag",
        schemas.GetTagArgs,
        repository.handle_get_tag,
    ),
    ToolSpec(
        "bb_get_commits",
        "Get commits for a repository branch",
        schemas.GetCommitsArgs,
        repository.handle_get_commits,
    ),
    ToolSpec(
        "bb_browse_repository",
        "Browse files and directories in a repository",
        schemas.BrowseRepositoryArgs,
        repository.handle_browse_repository,
    ),
    ToolSpec(
        "bb_get_file_content",
        "Get the content of a file from a repository, with line-based pagination",
        schemas.GetFileContentArgs,
        repository.handle_get_file_content,
    ),
    # Pull requests
    ToolSpec(
        "bb_get_pull_requests",
        "Get pull requests for a repository",
        schemas.GetPullRequestsArgs,
        pullrequest.handle_get_pull_requests,
    ),
    ToolSpec(
        "bb_get_pull_request",
        "Get detailed information about a specific pull request",
        schemas.PullRequestArgs,
        pullrequest.handle_get_pull_request,
    ),
    ToolSpec(
        "bb_get_pull_request_comments",
        "Get comments for a specific pull request",
        schemas.GetPullRequestCommentsArgs,
        pullrequest.handle_get_pull_request_comments,
    ),
    ToolSpec(
        "bb_get_pull_request_comment",
        "Get a single pull request comment by ID",
        schemas.GetPullRequestCommentArgs,
        pullrequest.handle_get_pull_request_comment,
    ),
    ToolSpec(
        "bb_get_comment_thread",
        "Get a pull request comment together with all of its replies",
        schemas.GetCommentThreadArgs,
        pullrequest.handle_get_comment_thread,
    ),
    ToolSpec(
        "bb_get_pull_request_activity",
        "Get the activity log (comments, approvals, updates) of a pull request",
        schemas.GetPullRequestActivityArgs,
        pullrequest.handle_get_pull_request_activity,
    ),
    ToolSpec(
        "bb_get_pull_request_commits",
        "List the commits that belong to a pull request",
        schemas.GetPullRequestCommitsArgs,
        pullrequest.handle_get_pull_request_commits,
    ),
    ToolSpec(
        "bb_get_pull_request_statuses",
        "Get CI/CD build statuses for a pull request",
        schemas.GetPullRequestStatusesArgs,
        pullrequest.handle_get_pull_request_statuses,
    ),
    # Diffs
    ToolSpec(
        "bb_get_pull_request_diff",
        "Get the raw unified diff for a pull request",
        schemas.GetPullRequestDiffArgs,
        diff.handle_get_pull_request_diff,
    ),
    ToolSpec(
        "bb_get_pull_request_diffstat",
        "Get a per-file change summary for a pull request",
        schemas.GetPullRequestDiffstatArgs,
        diff.handle_get_pull_request_diffstat,
    ),
    ToolSpec(
        "bb_get_diff",
        "Get the raw diff for a commit or commit range",
        schemas.GetDiffArgs,
        diff.handle_get_diff,
    ),
    ToolSpec(
        "bb_get_diffstat",
        "Get a per-file change summary for a commit or commit range",
        schemas.GetDiffstatArgs,
        diff.handle_get_diffstat,
    ),
    # Commits
    ToolSpec(
        "bb_get_commit",
        "Get detailed information about a specific commit",
        schemas.GetCommitArgs,
        commit.handle_get_commit,
    ),
    ToolSpec(
        "bb_get_commit_statuses",
        "Get CI/CD build statuses for a commit",
        schemas.GetCommitStatusesArgs,
        commit.handle_get_commit_statuses,
    ),
    ToolSpec(
        "bb_get_merge_base",
        "Get the common ancestor of two commits or branches",
        schemas.GetMergeBaseArgs,
        commit.handle_get_merge_base,
    ),
    ToolSpec(
        "bb_get_file_history",
        "List the commits that modified a file",
        schemas.GetFileHistoryArgs,
        commit.handle_get_file_history,
    ),
    # Issues
    ToolSpec(
        "bb_get_issues",
        "Get issues for a repository",
        schemas.GetIssuesArgs,
        issue.handle_get_issues,
    ),
    ToolSpec(
        "bb_get_issue",
        "Get detailed information about a specific issue",
        schemas.GetIssueArgs,
        issue.handle_get_issue,
    ),
    # Search
    ToolSpec(
        "bb_search_repositories",
        "Search repositories in a workspace by name or description",
        schemas.SearchRepositoriesArgs,
        search.handle_search_repositories,
    ),
    ToolSpec(
        "bb_search_code",
        "Search code content within a workspace",
        schemas.SearchCodeArgs,
        search.handle_search_code,
    ),
    # Workspaces and users
    ToolSpec(
        "bb_list_workspaces",
        "List all accessible workspaces for discovery and exploration",
        schemas.ListWorkspacesArgs,
        workspace.handle_list_workspaces,
    ),
    ToolSpec(
        "bb_get_workspace",
        "Get information about a workspace",
        schemas.GetWorkspaceArgs,
        workspace.handle_get_workspace,
    ),
    ToolSpec(
        "bb_get_user",
        "Get information about a user (defaults to the authenticated user)",
        schemas.GetUserArgs,
        workspace.handle_get_user,
    ),
    ToolSpec(
        "bb_get_current_user",
        "Get information about the currently authenticated user",
        schemas.GetCurrentUserArgs,
        workspace.handle_get_current_user,
    ),
    # Pipelines
    ToolSpec(
        "bb_list_pipelines",
        "List CI/CD pipeline runs for a repository, most recent first",
        schemas.ListPipelinesArgs,
        pipeline.handle_list_pipelines,
    ),
    ToolSpec(
        "bb_get_pipeline",
        "Get details of a specific pipeline run",
        schemas.GetPipelineArgs,
        pipeline.handle_get_pipeline,
    ),
    ToolSpec(
        "bb_get_pipeline_steps",
        "List the steps of a pipeline run",
        schemas.GetPipelineStepsArgs,
        pipeline.handle_get_pipeline_steps,
    ),
    ToolSpec(
        "bb_get_pipeline_step_log",
        "Get the build log output for a pipeline step",
        schemas.GetPipelineStepLogArgs,
        pipeline.handle_get_pipeline_step_log,
    ),
]

TOOLS: dict[str, ToolSpec] = {spec.name: spec for spec in _SPECS}


def list_tools() -> list[types.Tool]:
    return [spec.definition() for spec in TOOLS.values()]


def _error(message: str) -> ToolResponse:
    return ToolResponse(f"Error: {message}", is_error=True)


async def call_tool(name: str, arguments: dict | None) -> ToolResponse:
    """Run a tool and turn every failure into an error response."""
    spec = TOOLS.get(name)
    if spec is None:
        return _error(f"Unknown tool: {name}")

    try:
        return await spec.handler(arguments or {})
    except ValidationError as e:
        return _error(f"Invalid arguments for {name}: {e}")
    except BitbucketApiError as e:
        message = str(e)
        if e.suggestion:
            message += f"\nSuggestion: {e.suggestion}"
        return _error(message)
    except Exception as e:
        logger.error("Tool %s failed: %s", name, e, exc_info=True)
        return _error(str(e))

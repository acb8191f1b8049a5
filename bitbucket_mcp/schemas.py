"""Argument models for the Bitbucket tools."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import MAX_BROWSE_ITEMS, MAX_FILE_LINES, MAX_PAGE_SIZE

_WORKSPACE = "The workspace or username"
_REPO_SLUG = "The repository name"
_PAGE = "Page number for pagination"
_PAGELEN = f"Number of items per page (max {MAX_PAGE_SIZE})"


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Paged(ToolArgs):
    page: int | None = Field(default=None, ge=1, description=_PAGE)
    pagelen: int | None = Field(default=None, ge=1, description=_PAGELEN)


class RepoArgs(ToolArgs):
    workspace: str = Field(description=_WORKSPACE)
    repo_slug: str = Field(description=_REPO_SLUG)


class PagedRepoArgs(RepoArgs, Paged):
    pass


class GetRepositoryArgs(RepoArgs):
    pass


class ListRepositoriesArgs(Paged):
    workspace: str = Field(description=_WORKSPACE)


class GetBranchesArgs(PagedRepoArgs):
    pass


class GetBranchArgs(RepoArgs):
    name: str = Field(description="The branch name")


class GetTagsArgs(PagedRepoArgs):
    pass


class GetTagArgs(RepoArgs):
    name: str = Field(description="The tag name")


class GetCommitsArgs(PagedRepoArgs):
    branch: str | None = Field(default=None, description="Branch name (defaults to main branch)")


class BrowseRepositoryArgs(RepoArgs):
    ref: str | None = Field(
        default=None, description="Branch, tag, or commit (defaults to the main branch)"
    )
    path: str | None = Field(default=None, description="Directory path (defaults to root)")
    limit: int | None = Field(
        default=None, ge=1, description=f"Maximum number of items (max {MAX_BROWSE_ITEMS})"
    )


class GetFileContentArgs(RepoArgs):
    file_path: str = Field(description="Path to the file in the repository")
    ref: str | None = Field(default=None, description="Branch, tag, or commit")
    start: int | None = Field(default=None, ge=1, description="First line to return (1-based)")
    limit: int | None = Field(
        default=None, ge=1, description=f"Number of lines to return (max {MAX_FILE_LINES})"
    )


class GetPullRequestsArgs(PagedRepoArgs):
    state: Literal["OPEN", "MERGED", "DECLINED", "SUPERSEDED"] | None = Field(
        default=None, description="Filter by pull request state"
    )


class PullRequestArgs(RepoArgs):
    pull_request_id: int = Field(description="The pull request ID")


class GetPullRequestCommentsArgs(PullRequestArgs, Paged):
    pass


class GetPullRequestCommentArgs(PullRequestArgs):
    comment_id: int = Field(description="The comment ID")


class GetPullRequestActivityArgs(PullRequestArgs, Paged):
    pass


class GetPullRequestCommitsArgs(PullRequestArgs, Paged):
    pass


class GetPullRequestStatusesArgs(PullRequestArgs, Paged):
    pass


class GetCommentThreadArgs(PullRequestArgs):
    comment_id: int = Field(
        description="The root comment ID to get thread for (will include all replies)"
    )


class GetPullRequestDiffArgs(PullRequestArgs):
    context: int | None = Field(default=None, ge=0, description="Lines of context around changes")
    path: str | None = Field(default=None, description="Limit the diff to this file path")


class GetPullRequestDiffstatArgs(PullRequestArgs):
    path: str | None = Field(default=None, description="Limit the diffstat to this file path")


class GetDiffstatArgs(RepoArgs):
    spec: str = Field(description="Commit range, e.g. 'abc123..def456' or a single commit")
    path: str | None = Field(default=None, description="Limit the diffstat to this file path")
    ignore_whitespace: bool | None = Field(default=None, description="Ignore whitespace changes")
    topic: bool | None = Field(
        default=None,
        description="With a two-commit spec, diff the source against the merge base (3-dot diff)",
    )


class GetDiffArgs(GetDiffstatArgs):
    context: int | None = Field(default=None, ge=0, description="Lines of context around changes")


class GetCommitArgs(RepoArgs):
    commit: str = Field(description="Commit hash, branch, or tag")


class GetCommitStatusesArgs(PagedRepoArgs):
    commit: str = Field(description="The commit hash")


class GetMergeBaseArgs(RepoArgs):
    revspec: str = Field(
        description="Two commits or branches separated by '..' (e.g. 'main..feature-branch')"
    )


class GetFileHistoryArgs(PagedRepoArgs):
    commit: str = Field(description="Commit hash, branch, or tag to start history from")
    path: str = Field(description="Path to the file in the repository")


class GetIssuesArgs(PagedRepoArgs):
    state: Literal[
        "new", "open", "resolved", "on hold", "invalid", "duplicate", "wontfix", "closed"
    ] | None = Field(default=None, description="Filter by issue state")
    kind: Literal["bug", "enhancement", "proposal", "task"] | None = Field(
        default=None, description="Filter by issue kind"
    )


class GetIssueArgs(RepoArgs):
    issue_id: int = Field(description="The issue ID")


class SearchRepositoriesArgs(Paged):
    workspace: str = Field(description="The workspace or username to search in")
    query: str = Field(description="Text matched against repository names and descriptions")
    sort: str | None = Field(default=None, description="Sort field, e.g. '-updated_on'")


class SearchCodeArgs(Paged):
    workspace: str = Field(description="The workspace to search in")
    search_query: str = Field(description="Search query for code content")
    repo_slug: str | None = Field(default=None, description="Limit the search to one repository")
    language: str | None = Field(default=None, description="Filter by programming language")
    extension: str | None = Field(default=None, description="Filter by file extension")


class ListWorkspacesArgs(Paged):
    pass


class GetWorkspaceArgs(ToolArgs):
    workspace: str = Field(description=_WORKSPACE)


class GetUserArgs(ToolArgs):
    selected_user: str | None = Field(
        default=None, description="Username or UUID (defaults to the authenticated user)"
    )


class GetCurrentUserArgs(ToolArgs):
    pass


class ListPipelinesArgs(PagedRepoArgs):
    pass


class GetPipelineArgs(RepoArgs):
    pipeline_uuid: str = Field(description="The pipeline UUID (with or without braces)")


class GetPipelineStepsArgs(GetPipelineArgs, Paged):
    pass


class GetPipelineStepLogArgs(RepoArgs):
    pipeline_uuid: str = Field(description="The pipeline UUID")
    step_uuid: str = Field(description="The step UUID")

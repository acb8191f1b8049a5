"""Typed errors for Bitbucket API failures."""

import re

AUTH_SUGGESTION = "Check your authentication credentials (BITBUCKET_API_TOKEN + BITBUCKET_EMAIL)"
NOT_FOUND_SUGGESTION = "Check the workspace/repository names and ensure you have access"
FORBIDDEN_SUGGESTION = "Your credentials may not have sufficient permissions for this resource"
RATE_LIMIT_SUGGESTION = "Please wait before retrying"

# Ordered: the first matching pattern names the resource.
_RESOURCE_PATTERNS = [
    (re.compile(r"/repositories/[^/]+/[^/]+$"), "repository"),
    (re.compile(r"/repositories/[^/]+/[^/]+/pullrequests"), "pull request"),
    (re.compile(r"/repositories/[^/]+/[^/]+/issues"), "issue"),
    (re.compile(r"/repositories/[^/]+/[^/]+/src"), "file"),
    (re.compile(r"/repositories/[^/]+/[^/]+/commits"), "commit"),
    (re.compile(r"/repositories/[^/]+/[^/]+/refs"), "branch"),
    (re.compile(r"/workspaces/[^/]+$"), "workspace"),
    (re.compile(r"/user"), "user"),
]


class BitbucketApiError(Exception):
    """Non-2xx response from the Bitbucket API."""

    def __init__(
        self,
        status: int,
        status_text: str,
        detail: str | None = None,
        suggestion: str | None = None,
        resource: str | None = None,
    ):
        self.status = status
        self.status_text = status_text
        self.detail = detail or ""
        self.suggestion = suggestion
        self.resource = resource
        message = f"Bitbucket API error: {status} {status_text}"
        if self.detail:
            message += f" - {self.detail}"
        super().__init__(message)


class AuthenticationError(BitbucketApiError):
    def __init__(self, detail: str | None = None, resource: str | None = None):
        super().__init__(401, "Unauthorized", detail, AUTH_SUGGESTION, resource)


class ForbiddenError(BitbucketApiError):
    def __init__(self, resource: str | None = None):
        detail = f"Access denied to {resource}" if resource else "Access denied"
        super().__init__(403, "Forbidden", detail, FORBIDDEN_SUGGESTION, resource)


class NotFoundError(BitbucketApiError):
    def __init__(
        self,
        resource: str | None = None,
        detail: str | None = None,
        suggestion: str = NOT_FOUND_SUGGESTION,
    ):
        detail = detail or f"The requested {resource or 'resource'} was not found"
        super().__init__(404, "Not Found", detail, suggestion, resource)


class RateLimitError(BitbucketApiError):
    def __init__(self, resource: str | None = None):
        super().__init__(
            429, "Too Many Requests", "Rate limit exceeded", RATE_LIMIT_SUGGESTION, resource
        )


class RequestTimeoutError(Exception):
    """A single attempt did not complete within the configured timeout."""

    def __init__(self, timeout_ms: int, url: str):
        self.timeout_ms = timeout_ms
        self.url = url
        super().__init__(f"Request timeout after {timeout_ms}ms: {url}")


class ReadOnlyViolationError(RuntimeError):
    """A caller asked for a mutating HTTP method. Never reaches the network."""


def extract_error_detail(body) -> str:
    """Pull a human-readable message out of a loosely-shaped error body.

    Accepts ``{"error": {"message": ..., "detail": ...}}`` or
    ``{"message": ...}``; anything else yields an empty string.
    """
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        detail = str(error["message"])
        if error.get("detail"):
            detail += f" ({error['detail']})"
        return detail
    if body.get("message"):
        return str(body["message"])
    return ""


def infer_resource_kind(url: str | None) -> str:
    if not url:
        return "resource"
    path = url.split("?", 1)[0]
    for pattern, resource in _RESOURCE_PATTERNS:
        if pattern.search(path):
            return resource
    return "resource"


def classify_failure(
    status: int,
    status_text: str,
    body=None,
    url: str | None = None,
) -> BitbucketApiError:
    """Map an HTTP failure onto the error taxonomy."""
    detail = extract_error_detail(body)
    resource = infer_resource_kind(url)

    if status == 401:
        return AuthenticationError(detail, resource=resource)
    if status == 403:
        return ForbiddenError(resource)
    if status == 404:
        return NotFoundError(resource, detail=detail)
    if status == 429:
        return RateLimitError(resource)
    return BitbucketApiError(status, status_text, detail, resource=resource)

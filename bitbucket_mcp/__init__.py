"""Read-only Bitbucket Cloud gateway exposed as MCP tools.

Every outbound request goes through ``client``, which pins the HTTP method to
GET, applies auth, timeouts and retry with backoff, and maps failures onto the
typed errors in ``errors``.
"""

from .auth import build_auth_headers, build_request_headers
from .client import execute_json_request, execute_text_request, fetch_all_pages
from .errors import BitbucketApiError, ReadOnlyViolationError, RequestTimeoutError
from .models import Credential, RequestOptions

__all__ = [
    "BitbucketApiError",
    "Credential",
    "ReadOnlyViolationError",
    "RequestOptions",
    "RequestTimeoutError",
    "build_auth_headers",
    "build_request_headers",
    "execute_json_request",
    "execute_text_request",
    "fetch_all_pages",
]

"""Read-only Bitbucket REST client: auth, timeout, retry, pagination."""

import asyncio
import json
import logging
from collections.abc import Awaitable
from urllib.parse import urlencode

import httpx

from .auth import build_request_headers
from .errors import (
    BitbucketApiError,
    ReadOnlyViolationError,
    RequestTimeoutError,
    classify_failure,
)
from .models import MAX_PAGE_SIZE, MAX_PAGES, READ_METHOD, RETRY_ATTEMPTS, Page, RequestOptions
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json"
TEXT_ACCEPT = "text/plain"


def is_retryable(status: int) -> bool:
    """Server errors and rate limiting are transient; other 4xx are not."""
    return status >= 500 or status == 429


def backoff_seconds(attempt: int) -> float:
    """Exponential backoff: 1s, 2s, 4s, ..."""
    return float(2 ** (attempt - 1))


def _ensure_read_only(url: str, options: RequestOptions | None) -> RequestOptions:
    options = options or RequestOptions()
    method = (options.method or READ_METHOD).upper()
    if method != READ_METHOD:
        raise ReadOnlyViolationError(
            f"Only {READ_METHOD} requests are allowed. Attempted: {method} {url}"
        )
    return options


def _parse_error_body(text: str):
    try:
        return json.loads(text)
    except ValueError:
        return {"message": text}


async def _execute(
    url: str,
    options: RequestOptions,
    accept: str,
    transport: httpx.AsyncBaseTransport | None,
):
    settings = get_settings()
    headers = {
        **build_request_headers(accept, settings.credential),
        **options.headers,
    }
    timeout_ms = options.timeout_ms or settings.bitbucket_request_timeout
    timeout = timeout_ms / 1000
    last_error: Exception | None = None

    async with httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        follow_redirects=True,
    ) as client:
        for attempt in range(1, RETRY_ATTEMPTS + 1):
            logger.debug("GET %s (attempt %d/%d)", url, attempt, RETRY_ATTEMPTS)
            try:
                # Method is pinned here regardless of what the caller asked for.
                response = await asyncio.wait_for(
                    client.request(READ_METHOD, url, headers=headers),
                    timeout,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                last_error = RequestTimeoutError(timeout_ms, url)
                if attempt < RETRY_ATTEMPTS:
                    delay = backoff_seconds(attempt)
                    logger.warning("%s, retrying in %.0fs", last_error, delay)
                    await asyncio.sleep(delay)
                    continue
                raise last_error from None

            if response.is_success:
                if accept == TEXT_ACCEPT:
                    return response.text
                if not response.content:
                    return {}
                try:
                    return response.json()
                except ValueError:
                    content_type = response.headers.get("content-type") or "unknown content type"
                    raise BitbucketApiError(
                        response.status_code,
                        response.reason_phrase,
                        detail=f"Expected JSON but received {content_type}",
                    ) from None

            error = classify_failure(
                response.status_code,
                response.reason_phrase,
                _parse_error_body(response.text),
                url,
            )
            if is_retryable(response.status_code) and attempt < RETRY_ATTEMPTS:
                delay = backoff_seconds(attempt)
                logger.warning(
                    "GET %s returned %d, retrying in %.0fs (%d/%d)",
                    url, response.status_code, delay, attempt, RETRY_ATTEMPTS,
                )
                last_error = error
                await asyncio.sleep(delay)
                continue
            raise error

    raise last_error or RuntimeError(f"Request failed after {RETRY_ATTEMPTS} attempts")


def execute_json_request(
    url: str,
    options: RequestOptions | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Awaitable:
    """GET ``url`` and decode the JSON body.

    The read-only check runs before a coroutine exists, so a mutating method
    raises ``ReadOnlyViolationError`` at call time, not at await time.

    Raises:
        BitbucketApiError: terminal non-2xx response (see ``errors``).
        RequestTimeoutError: every attempt timed out.
    """
    options = _ensure_read_only(url, options)
    return _execute(url, options, JSON_ACCEPT, transport)


def execute_text_request(
    url: str,
    options: RequestOptions | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Awaitable[str]:
    """GET ``url`` as plain text (diffs, logs, raw files). Follows redirects."""
    options = _ensure_read_only(url, options)
    return _execute(url, options, TEXT_ACCEPT, transport)


async def fetch_all_pages(
    url: str,
    max_pages: int = MAX_PAGES,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list:
    """Follow ``next`` links and concatenate every page's ``values``.

    Stops quietly (with a warning) after ``max_pages`` requests.
    """
    collected = []
    next_url: str | None = url
    pages = 0

    while next_url:
        if pages >= max_pages:
            logger.warning(
                "Reached max page limit (%d) for %s, results may be truncated", max_pages, url
            )
            break
        body = await execute_json_request(next_url, transport=transport)
        page = Page.from_body(body)
        collected.extend(page.values)
        next_url = page.next
        pages += 1

    return collected


def build_api_url(endpoint: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    base = settings.bitbucket_api_base.rstrip("/")
    ep = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{base}{ep}"


def add_query_params(url: str, params: dict) -> str:
    """Append non-None params, capping page sizes at the API maximum."""
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if key in ("pagelen", "limit") and isinstance(value, int):
            value = min(value, MAX_PAGE_SIZE)
        if isinstance(value, bool):
            value = str(value).lower()
        pairs.append((key, value))
    if not pairs:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(pairs)}"


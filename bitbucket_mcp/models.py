"""Data models and constants for the Bitbucket gateway."""

from dataclasses import dataclass, field

VERSION = "1.5.1"

READ_METHOD = "GET"
RETRY_ATTEMPTS = 3
MAX_PAGES = 50

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
MAX_FILE_LINES = 10_000
DEFAULT_FILE_LINES = 1000
MAX_BROWSE_ITEMS = 100
DEFAULT_BROWSE_ITEMS = 50
MAX_LOG_LENGTH = 50_000


@dataclass(frozen=True)
class Credential:
    """Account email plus API token used for HTTP Basic auth."""

    email: str | None = None
    token: str | None = None


@dataclass
class RequestOptions:
    """Per-call options for the request executor."""

    method: str = READ_METHOD
    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None


@dataclass
class Page:
    """One page of a Bitbucket listing response."""

    values: list
    next: str | None = None
    size: int | None = None

    @classmethod
    def from_body(cls, body) -> "Page":
        if not isinstance(body, dict):
            return cls(values=[])
        return cls(
            values=list(body.get("values") or []),
            next=body.get("next"),
            size=body.get("size"),
        )


@dataclass
class ToolResponse:
    """Text result of a tool invocation."""

    text: str
    is_error: bool = False

"""Request header construction."""

import base64

from .models import VERSION, Credential

USER_AGENT = f"bitbucket-mcp/{VERSION}"


def build_auth_headers(credential: Credential | None = None) -> dict[str, str]:
    """Basic auth header for an email + API token pair, or nothing."""
    if credential is None or not credential.email or not credential.token:
        return {}
    raw = f"{credential.email}:{credential.token}".encode()
    return {"Authorization": f"Basic {base64.b64encode(raw).decode()}"}


def build_request_headers(
    accept: str = "application/json",
    credential: Credential | None = None,
) -> dict[str, str]:
    return {
        "Accept": accept,
        "User-Agent": USER_AGENT,
        **build_auth_headers(credential),
    }

"""Application settings loaded from environment variables and .env file."""

import re
from dataclasses import dataclass

from pydantic import AnyHttpUrl, Field, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Credential

DEFAULT_API_BASE = "https://api.bitbucket.org/2.0"
DEFAULT_REQUEST_TIMEOUT_MS = 30_000

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HTTP_URL = TypeAdapter(AnyHttpUrl)


class ConfigurationError(Exception):
    """Raised when environment configuration fails validation."""


class Settings(BaseSettings):
    """Settings for the Bitbucket gateway."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bitbucket_email: str | None = None
    bitbucket_api_token: str | None = None
    bitbucket_api_base: str = DEFAULT_API_BASE
    bitbucket_request_timeout: int = Field(default=DEFAULT_REQUEST_TIMEOUT_MS, gt=0)
    bitbucket_debug: bool = False

    @field_validator("bitbucket_email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value and not _EMAIL.match(value):
            raise ValueError("BITBUCKET_EMAIL must be a valid email address")
        return value or None

    @field_validator("bitbucket_api_base")
    @classmethod
    def _check_api_base(cls, value: str) -> str:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("BITBUCKET_API_BASE must be a valid http(s) URL") from None
        return value

    @property
    def credential(self) -> Credential | None:
        if self.bitbucket_email and self.bitbucket_api_token:
            return Credential(email=self.bitbucket_email, token=self.bitbucket_api_token)
        return None


def get_settings() -> Settings:
    """Load settings from the environment.

    Not cached: each logical operation re-reads the environment so that
    changes between calls (tests, long-lived servers) are honored.
    """
    try:
        return Settings()
    except ValidationError as e:
        problems = "\n".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Configuration validation failed:\n{problems}") from e


@dataclass
class AuthMode:
    method: str
    is_valid: bool
    warning: str | None = None


def validate_authentication(settings: Settings) -> AuthMode:
    if settings.credential is not None:
        return AuthMode(method="api-token", is_valid=True)
    return AuthMode(
        method="none",
        is_valid=False,
        warning="No authentication configured. Only public repositories will be accessible.",
    )

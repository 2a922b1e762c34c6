"""Client configuration, read from ``SNAILPOINTS_*`` environment variables."""

from __future__ import annotations

import os
import secrets
from typing import Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from snailpoints.exceptions import ConfigurationError

ENV_PREFIX = "SNAILPOINTS_"


class ClientConfig(BaseModel):
    """Settings for the API client, logging and the web UI."""
    model_config = {"frozen": True}

    api_base: str = Field(
        default="http://localhost:8080/api",
        description="Base URL every backend path is relative to",
    )
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    log_level: str = "INFO"
    json_logs: bool = False
    ui_host: str = "127.0.0.1"
    ui_port: int = Field(default=8081, ge=1, le=65535)
    storage_secret: str = Field(default_factory=lambda: secrets.token_hex(32))
    session_token: str | None = Field(
        default=None, description="Value of the backend's session cookie, for headless use"
    )

    @field_validator("api_base")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("api_base must not be empty")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> ClientConfig:
        """Build a config from the environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Explicit values (e.g. from CLI options); ``None``
                values are ignored.

        Raises:
            ConfigurationError: If a value fails validation.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

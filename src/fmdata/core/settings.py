"""Connection settings for the FileMaker Data API.

``FileMakerSettings`` is the explicit configuration struct handed to
``FileMakerClient``.  Values come from constructor arguments, ``FILEMAKER_*``
environment variables, or a ``.env`` file, in that order of precedence.

Features:
    - **Pydantic validation:** Type-checked when the client is built
    - **env_prefix:** ``FILEMAKER_SERVER``, ``FILEMAKER_DATABASE``, ...
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from fmdata.core.settings import FileMakerSettings
    >>> settings = FileMakerSettings(server="https://fms.example.com", database="Heroes")
    >>> settings.base_url
    'https://fms.example.com/fmi/data/v1/databases/Heroes/'

Tags:
    settings, configuration, pydantic, environment, fmdata

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FileMakerSettings(BaseSettings):
    """Where the Data API lives and how to reach it.

    Fields
    ──────
    server       : Scheme and host of the FileMaker Server
    database     : Hosted file (the Data API "database") to open
    user         : Account name used to open a session
    password     : Account password
    api_version  : Data API version segment (``v1``, ``v2``, ``vLatest``)
    timeout      : Per-request timeout in seconds
    verify_ssl   : Verify the server certificate
    log_level    : Structlog log level
    log_json     : Force JSON (True) or console (False) rendering
    """

    model_config = SettingsConfigDict(
        env_prefix="FILEMAKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    server: str | None = None
    database: str | None = None
    user: str | None = None
    password: SecretStr | None = None
    api_version: str = "v1"

    # ── HTTP ─────────────────────────────────────────────────────
    timeout: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @property
    def base_url(self) -> str:
        """Database-scoped Data API root, always ending in ``/``."""
        server = (self.server or "").rstrip("/")
        database = quote(self.database or "", safe="")
        return f"{server}/fmi/data/{self.api_version}/databases/{database}/"


@lru_cache
def get_settings() -> FileMakerSettings:
    """Process-wide settings read from the environment."""
    return FileMakerSettings()


__all__ = ["FileMakerSettings", "get_settings"]

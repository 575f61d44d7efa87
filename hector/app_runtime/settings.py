"""Runtime configuration loaded from HECTOR_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class HectorSettings(BaseSettings):
    """Hector app runtime settings.

    All fields are read from environment variables with the ``HECTOR_`` prefix.
    For example, ``HECTOR_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Data storage ----------------------------------------------------------
    data_root: str = "./data"
    """Root directory for app documents and files used by file actions."""

    data_prefix: str | None = None
    """Optional namespace prefix inserted into all data paths.

    When set, all paths become ``{data_root}/{data_prefix}/...``.
    """

    app_store: Literal["local", "s3"] = "local"

    # S3 (only when app_store = "s3")
    s3_endpoint: str | None = None
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_path_style: bool = False
    """Use path-style addressing (required by MinIO and some S3-compatible services)."""

    # -- Localization ----------------------------------------------------------
    default_language: str = "en-US"
    """Fallback language when a localized value has no entry for the requested one."""

    # -- Generation service ----------------------------------------------------
    generation_base_url: str = "http://localhost:8080"
    generation_api_key: SecretStr | None = None
    generation_timeout: float = 120.0
    """Transport timeout (seconds) for a single generation call."""

    # -- Helpers ---------------------------------------------------------------

    @property
    def files_root(self) -> str:
        """Directory that ``readFile`` / ``writeFile`` paths are relative to."""
        base = Path(self.data_root)
        if self.data_prefix:
            base = base / self.data_prefix
        return str(base / "files")


def get_settings() -> HectorSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> HectorSettings:
    return HectorSettings()


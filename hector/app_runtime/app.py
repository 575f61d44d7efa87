"""Runtime assembly.

Builds the store, generation service and app manager from ``HectorSettings``
for an embedding process.  Nothing here is a global: callers hold the
``HectorRuntime`` and pass its parts around explicitly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from loguru import logger

from hector.app_runtime.context import AppSession
from hector.app_runtime.log import setup_logging
from hector.app_runtime.managers.apps import AppManager
from hector.app_runtime.services.http import HttpGenerationService
from hector.app_runtime.settings import HectorSettings, get_settings
from hector.app_runtime.store.base import AppStore, FileStore
from hector.app_runtime.store.local import LocalAppStore, LocalFileStore
from hector.app_runtime.store.s3 import S3AppStore

# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def create_app_store(settings: HectorSettings) -> AppStore:
    """Create the app store backend based on configuration."""
    if settings.app_store == "s3":
        if not settings.s3_bucket:
            msg = "HECTOR_S3_BUCKET is required when HECTOR_APP_STORE=s3"
            raise ValueError(msg)
        return S3AppStore(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None,
            prefix=settings.data_prefix,
            region=settings.s3_region,
            path_style=settings.s3_path_style,
        )
    return LocalAppStore(settings.data_root, prefix=settings.data_prefix)


def create_file_store(settings: HectorSettings) -> FileStore:
    return LocalFileStore(settings.files_root)


def create_generation_service(settings: HectorSettings) -> HttpGenerationService:
    api_key = settings.generation_api_key.get_secret_value() if settings.generation_api_key else None
    return HttpGenerationService(
        settings.generation_base_url,
        api_key=api_key,
        timeout=settings.generation_timeout,
    )


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


@dataclass
class HectorRuntime:
    settings: HectorSettings
    manager: AppManager
    generation: HttpGenerationService
    files: FileStore

    async def open_session(self, app_id: str, *, language: str | None = None) -> AppSession:
        return await AppSession.open(
            self.manager,
            app_id,
            generation=self.generation,
            files=self.files,
            language=language,
            fallback_language=self.settings.default_language,
        )


@asynccontextmanager
async def create_runtime(settings: HectorSettings | None = None) -> AsyncIterator[HectorRuntime]:
    """Configure logging, build the backends and close them on exit."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    prefix_info = f", prefix={settings.data_prefix}" if settings.data_prefix else ""
    logger.info("Data root: {} (store={}{})", settings.data_root, settings.app_store, prefix_info)

    manager = AppManager(create_app_store(settings), default_language=settings.default_language)
    async with create_generation_service(settings) as generation:
        yield HectorRuntime(
            settings=settings,
            manager=manager,
            generation=generation,
            files=create_file_store(settings),
        )
    logger.info("Hector runtime closed")

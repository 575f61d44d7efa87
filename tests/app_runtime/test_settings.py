"""Unit tests for settings and backend factories."""

from __future__ import annotations

from pathlib import Path

import pytest

from hector.app_runtime.app import (
    create_app_store,
    create_file_store,
    create_generation_service,
    create_runtime,
)
from hector.app_runtime.settings import HectorSettings, get_settings
from hector.app_runtime.store.local import LocalAppStore, LocalFileStore
from hector.app_runtime.store.s3 import S3AppStore


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = HectorSettings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.app_store == "local"
    assert settings.default_language == "en-US"
    assert settings.data_prefix is None


def test_reads_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("HECTOR_DATA_ROOT", "/srv/hector")
    clean_env.setenv("HECTOR_DATA_PREFIX", "acme")
    clean_env.setenv("HECTOR_GENERATION_API_KEY", "sk-test")
    clean_env.setenv("HECTOR_GENERATION_TIMEOUT", "30")

    settings = get_settings()

    assert settings.data_root == "/srv/hector"
    assert settings.generation_api_key is not None
    assert settings.generation_api_key.get_secret_value() == "sk-test"
    assert "sk-test" not in repr(settings)
    assert settings.generation_timeout == 30.0
    assert Path(settings.files_root) == Path("/srv/hector/acme/files")


def test_get_settings_is_cached(clean_env: pytest.MonkeyPatch) -> None:
    assert get_settings() is get_settings()


def test_create_local_stores(tmp_path) -> None:
    settings = HectorSettings(_env_file=None, data_root=str(tmp_path))
    assert isinstance(create_app_store(settings), LocalAppStore)
    assert isinstance(create_file_store(settings), LocalFileStore)


def test_create_s3_store_requires_bucket(tmp_path) -> None:
    settings = HectorSettings(_env_file=None, data_root=str(tmp_path), app_store="s3")
    with pytest.raises(ValueError, match="HECTOR_S3_BUCKET"):
        create_app_store(settings)


def test_create_s3_store() -> None:
    settings = HectorSettings(
        _env_file=None,
        app_store="s3",
        s3_bucket="apps",
        s3_endpoint="http://localhost:9000",
        s3_access_key="minio",
        s3_secret_key="minio-secret",
        s3_region="us-east-1",
        s3_path_style=True,
    )
    assert isinstance(create_app_store(settings), S3AppStore)


async def test_create_generation_service_sets_bearer() -> None:
    settings = HectorSettings(_env_file=None, generation_api_key="sk-test")
    async with create_generation_service(settings) as service:
        assert service._client.headers["Authorization"] == "Bearer sk-test"


async def test_create_runtime_opens_sessions(tmp_path) -> None:
    settings = HectorSettings(_env_file=None, data_root=str(tmp_path), default_language="pt-BR")
    async with create_runtime(settings) as runtime:
        session = await runtime.open_session("fresh")
        assert session.app.name == {"pt-BR": "Untitled App"}
        assert session.orchestrator.language == "pt-BR"
        assert await runtime.manager.exists("fresh")

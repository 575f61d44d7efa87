"""Fixtures for app runtime tests."""

from __future__ import annotations

import pytest
from fakes import FakeGenerationService

from hector.app_runtime.store.local import LocalFileStore


@pytest.fixture
def generation() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def files(tmp_path) -> LocalFileStore:
    return LocalFileStore(tmp_path / "files")

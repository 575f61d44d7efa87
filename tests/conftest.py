"""Shared test fixtures.

Everything runs in-process: stores use ``tmp_path`` and the generation
service is a fake (see ``tests/app_runtime/conftest.py``).  S3 tests are
opt-in via ``HECTOR_S3_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from hector.app_runtime.settings import _get_settings_cached


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove HECTOR_* variables and invalidate the settings cache around a test."""
    for key in list(os.environ):
        if key.startswith("HECTOR_"):
            monkeypatch.delenv(key)
    _get_settings_cached.cache_clear()
    yield monkeypatch
    _get_settings_cached.cache_clear()

"""Local filesystem stores.

App documents live under a unified data root with optional namespace prefix::

    {data_root}/{prefix}/apps/{app_id}.json
    {data_root}/{prefix}/apps/{app_id}/executions/{execution_id}.json

When prefix is None, the path collapses to::

    {data_root}/apps/{app_id}.json

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path, so a crash mid-save never leaves a
half-written document behind.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from functools import partial
from pathlib import Path

from anyio import to_thread

from hector.app_runtime.models.app import AppConfig
from hector.app_runtime.models.execution import Execution
from hector.app_runtime.store.base import APPS_DIR, EXECUTIONS_DIR, check_app_id

_SUFFIX = ".json"


class LocalAppStore:
    """Local filesystem implementation of the AppStore protocol.

    Layout::

        {base}/apps/{app_id}.json

    Where ``base`` is ``data_root / prefix`` (or just ``data_root`` if no prefix).
    """

    def __init__(self, data_root: str | Path, prefix: str | None = None) -> None:
        base = Path(data_root)
        if prefix:
            base = base / prefix
        self._base = base / APPS_DIR

    def _app_path(self, app_id: str) -> Path:
        return self._base / f"{check_app_id(app_id)}{_SUFFIX}"

    def _history_dir(self, app_id: str) -> Path:
        return self._base / check_app_id(app_id) / EXECUTIONS_DIR

    def _execution_path(self, app_id: str, execution_id: str) -> Path:
        execution_id = check_app_id(execution_id, kind="execution")
        return self._history_dir(app_id) / f"{execution_id}{_SUFFIX}"

    # -- Write -----------------------------------------------------------------

    async def write_app(self, app: AppConfig) -> None:
        data = app.model_dump_json(by_alias=True, indent=2)
        await to_thread.run_sync(partial(_atomic_write, self._app_path(app.id), data))

    # -- Read ------------------------------------------------------------------

    async def read_app(self, app_id: str) -> AppConfig:
        raw = await to_thread.run_sync(partial(_read_file, self._app_path(app_id)))
        return AppConfig.model_validate_json(raw)

    async def list_app_ids(self) -> list[str]:
        return await to_thread.run_sync(partial(_list_stems, self._base, _SUFFIX))

    # -- Utilities -------------------------------------------------------------

    async def exists(self, app_id: str) -> bool:
        return await to_thread.run_sync(self._app_path(app_id).exists)

    async def delete(self, app_id: str) -> None:
        await to_thread.run_sync(partial(_unlink, self._app_path(app_id)))
        await to_thread.run_sync(partial(_remove_tree, self._base / check_app_id(app_id)))

    # -- Execution history -----------------------------------------------------

    async def write_execution(self, app_id: str, execution_id: str, execution: Execution) -> None:
        data = execution.model_dump_json(by_alias=True, indent=2)
        await to_thread.run_sync(partial(_atomic_write, self._execution_path(app_id, execution_id), data))

    async def read_execution(self, app_id: str, execution_id: str) -> Execution:
        raw = await to_thread.run_sync(partial(_read_file, self._execution_path(app_id, execution_id)))
        return Execution.model_validate_json(raw)

    async def list_execution_ids(self, app_id: str) -> list[str]:
        return await to_thread.run_sync(partial(_list_stems, self._history_dir(app_id), _SUFFIX))


class LocalFileStore:
    """FileStore confined to a root directory.

    Paths that resolve outside the root raise ``PermissionError``.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root):
            msg = f"Path escapes the file store root: {path}"
            raise PermissionError(msg)
        return target

    async def read_file(self, path: str) -> str:
        return await to_thread.run_sync(partial(_read_file, self._resolve(path)))

    async def write_file(self, path: str, content: str) -> None:
        await to_thread.run_sync(partial(_atomic_write, self._resolve(path), content))


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is
    atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> str:
    """Read file contents.  Raises ``FileNotFoundError`` if missing."""
    return path.read_text(encoding="utf-8")


def _list_stems(directory: Path, suffix: str) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.iterdir() if p.is_file() and p.suffix == suffix)


def _unlink(path: Path) -> None:
    """Remove a file.  No-op if it doesn't exist."""
    path.unlink(missing_ok=True)


def _remove_tree(path: Path) -> None:
    """Remove a directory tree.  No-op if it doesn't exist."""
    if path.is_dir():
        shutil.rmtree(path)

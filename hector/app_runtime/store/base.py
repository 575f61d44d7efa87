"""Store interfaces.

- **AppStore** persists whole app documents (definition plus last execution)
  as JSON, one object per app.  Every save replaces the document.  Earlier
  execution snapshots are kept beside it as an append-only history.
- **FileStore** backs the ``readFile`` / ``writeFile`` actions with plain
  text files.

Both are async so local filesystem and remote (S3) backends share one shape.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from hector.app_runtime.models.app import AppConfig
from hector.app_runtime.models.execution import Execution

APPS_DIR = "apps"
EXECUTIONS_DIR = "executions"

_APP_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def check_app_id(app_id: str, *, kind: str = "app") -> str:
    """Reject ids that cannot be used as a single path segment / object key."""
    if not _APP_ID_RE.match(app_id) or ".." in app_id:
        msg = f"Invalid {kind} id: {app_id!r}"
        raise ValueError(msg)
    return app_id


@runtime_checkable
class AppStore(Protocol):
    """Async protocol for reading and writing app documents.

    Storage layout (keyed by app id)::

        {root}/apps/{app_id}.json
        {root}/apps/{app_id}/executions/{execution_id}.json
    """

    async def write_app(self, app: AppConfig) -> None:
        """Write (replace) the document for ``app.id``."""
        ...

    async def read_app(self, app_id: str) -> AppConfig:
        """Read an app.  Raises ``FileNotFoundError`` if not found.

        Raises ``pydantic.ValidationError`` if the stored document is invalid.
        """
        ...

    async def list_app_ids(self) -> list[str]:
        """Ids of all stored documents, sorted."""
        ...

    async def exists(self, app_id: str) -> bool:
        """Check whether a document exists for the given id."""
        ...

    async def delete(self, app_id: str) -> None:
        """Delete the document and its execution history.  No-op if not found."""
        ...

    # -- Execution history -----------------------------------------------------

    async def write_execution(self, app_id: str, execution_id: str, execution: Execution) -> None:
        """Store one execution snapshot under ``execution_id``."""
        ...

    async def read_execution(self, app_id: str, execution_id: str) -> Execution:
        """Read a snapshot.  Raises ``FileNotFoundError`` if not found."""
        ...

    async def list_execution_ids(self, app_id: str) -> list[str]:
        """Ids of the stored snapshots of one app, sorted (oldest first)."""
        ...


@runtime_checkable
class FileStore(Protocol):
    """Async text file access for file-system actions.

    Paths are relative to the store's root.
    """

    async def read_file(self, path: str) -> str:
        """Read a text file.  Raises ``FileNotFoundError`` if missing."""
        ...

    async def write_file(self, path: str, content: str) -> None:
        """Write (replace) a text file, creating parent directories."""
        ...

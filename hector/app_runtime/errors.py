"""Domain exceptions for the app runtime.

Execution errors (``MissingDependencyError``, ``GenerationError``) are caught
at the orchestrator boundary and turned into action status + message.
Persistence errors propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence

# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class MissingDependencyError(LookupError):
    """An action references artifacts that are not in the bag yet."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing dependencies: {', '.join(self.missing)}")


class GenerationError(RuntimeError):
    """The generation service rejected a call or returned an unusable payload."""


class UnknownArtifactError(LookupError):
    """A filename is not a declared input of the app."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"'{filename}' is not an input of this app")


class RunInProgressError(RuntimeError):
    """The bag cannot be edited while a run is in progress."""


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class PersistenceError(RuntimeError):
    """Saving or loading an app document failed."""


class AppNotFoundError(LookupError):
    """No app document exists for the given id."""

    def __init__(self, app_id: str) -> None:
        self.app_id = app_id
        super().__init__(f"App '{app_id}' not found")


class InvalidAppError(ValueError):
    """A stored or submitted app document failed validation."""


class ExecutionNotFoundError(LookupError):
    """No stored execution snapshot exists for the given app and id."""

    def __init__(self, app_id: str, execution_id: str) -> None:
        self.app_id = app_id
        self.execution_id = execution_id
        super().__init__(f"Execution '{execution_id}' of app '{app_id}' not found")

"""Editing session context.

An ``AppSession`` ties together what an editing UI holds while one app is
open: the app definition, the orchestrator that owns its bag, and the manager
used to persist it.  ``commit`` writes the orchestrator's snapshot back as the
app's ``last_execution`` so the next session resumes where this one stopped.

Every action that completes also appends a snapshot to the app's execution
history; ``history`` lists those snapshots and ``restore_from_history`` loads
one back into the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from loguru import logger

from hector.app_runtime.execution.orchestrator import ExecutionOrchestrator
from hector.app_runtime.localization import DEFAULT_LANGUAGE

if TYPE_CHECKING:
    from hector.app_runtime.managers.apps import AppManager
    from hector.app_runtime.models.app import AppConfig
    from hector.app_runtime.services.base import GenerationService
    from hector.app_runtime.store.base import FileStore


@dataclass
class AppSession:
    """In-flight state for one open app."""

    manager: AppManager
    orchestrator: ExecutionOrchestrator
    generation: GenerationService
    files: FileStore | None = None

    @classmethod
    async def open(
        cls,
        manager: AppManager,
        app_id: str,
        *,
        generation: GenerationService,
        files: FileStore | None = None,
        language: str | None = None,
        fallback_language: str = DEFAULT_LANGUAGE,
    ) -> AppSession:
        """Load (or create) *app_id* and restore its last execution."""
        app = await manager.get_app(app_id)
        orchestrator = ExecutionOrchestrator(
            app,
            generation=generation,
            files=files,
            language=language,
            fallback_language=fallback_language,
            history=partial(manager.record_execution, app.id),
        )
        logger.debug("Opened app {} (language={})", app.id, orchestrator.language)
        return cls(manager=manager, orchestrator=orchestrator, generation=generation, files=files)

    @property
    def app(self) -> AppConfig:
        return self.orchestrator.app

    def replace_app(self, app: AppConfig) -> None:
        """Swap in an edited definition, keeping the current bag, states and subscribers.

        States of removed actions are dropped by the new orchestrator.
        """
        if app.id != self.app.id:
            msg = f"Cannot replace app '{self.app.id}' with '{app.id}'"
            raise ValueError(msg)
        previous = self.orchestrator
        carried = app.model_copy(update={"last_execution": previous.snapshot()})
        self.orchestrator = ExecutionOrchestrator(
            carried,
            generation=self.generation,
            files=self.files,
            language=previous.language,
            fallback_language=previous.fallback_language,
            clean_inputs=False,
            history=partial(self.manager.record_execution, app.id),
        )
        for callback in previous.subscribers:
            self.orchestrator.subscribe(callback)

    async def commit(self) -> AppConfig:
        """Persist the app with the current snapshot as ``last_execution``."""
        saved = await self.manager.save_execution(self.app, self.orchestrator.snapshot())
        logger.debug("Committed app {} (run_state={})", saved.id, self.orchestrator.run_state)
        return saved

    # -- History ---------------------------------------------------------------

    async def history(self) -> list[str]:
        """Ids of the recorded executions of this app, oldest first."""
        return await self.manager.list_executions(self.app.id)

    async def restore_from_history(self, execution_id: str) -> None:
        execution = await self.manager.load_execution(self.app.id, execution_id)
        self.orchestrator.load_execution(execution)
        logger.debug("Restored app {} from execution {}", self.app.id, execution_id)

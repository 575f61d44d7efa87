"""Execution orchestrator -- runs actions in array order against one bag.

The orchestrator owns the ``ExecutionBag`` and the per-action state map for
one app.  A run (a single action, or all of them) moves through::

    idle -> running(i) -> complete | error

Step ``i``:

1. localize ``actions[i].prompt`` and substitute ``@name.ext`` tokens;
2. optional dependency gate -- when not playable the action is marked
   ``error`` and the executor is not called;
3. status ``loading``;
4. ``ActionExecutor.execute``;
5. success: replace the bag entry under ``action.filename``, status
   ``complete``;
6. failure: status ``error``, run error set, remaining actions not attempted.

Array order is the only dependency ordering.  Runs are serialized through an
``asyncio.Lock`` and the step function is the only place the bag is written
while a run is in progress.  Action failures never raise; they come back as a
``RunResult`` and are visible through ``get_status`` / ``snapshot``.

Observers register with ``subscribe`` and are called with no arguments after
every bag or status change.  A failing observer is logged and skipped.  When a
``history`` sink is given, a snapshot is handed to it after each action that
completes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from hector.app_runtime.errors import (
    GenerationError,
    MissingDependencyError,
    RunInProgressError,
    UnknownArtifactError,
)
from hector.app_runtime.execution.bag import ExecutionBag
from hector.app_runtime.execution.dependencies import (
    PlayableCheck,
    ReferenceIssue,
    check_playable,
    find_reference_issues,
)
from hector.app_runtime.execution.executor import ActionExecutor
from hector.app_runtime.execution.variables import substitute
from hector.app_runtime.localization import DEFAULT_LANGUAGE, resolve_localized
from hector.app_runtime.models.enums import ActionStatus, RunStatus
from hector.app_runtime.models.execution import ActionState, BagEntry, Execution

if TYPE_CHECKING:
    from hector.app_runtime.models.app import ActionData, AppConfig
    from hector.app_runtime.services.base import GenerationService
    from hector.app_runtime.store.base import FileStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[], object]
HistorySink = Callable[[Execution], Awaitable[object]]


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class RunResult:
    """Outcome of ``run_action`` / ``run_all``."""

    status: RunStatus
    error: str | None = None
    completed_action_ids: list[str] = field(default_factory=list)
    failed_action_id: str | None = None


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ExecutionOrchestrator:
    """Drive the actions of one app.

    The generation service (and optional file store) are injected; nothing
    is looked up globally.  ``language`` defaults to the app's selected
    language.  State is restored from ``app.last_execution`` when present;
    pass ``clean_inputs=False`` to keep values of ``clean_on_startup`` inputs
    (used when an open app is re-created after an edit).
    """

    def __init__(
        self,
        app: AppConfig,
        *,
        generation: GenerationService,
        files: FileStore | None = None,
        language: str | None = None,
        fallback_language: str = DEFAULT_LANGUAGE,
        clean_inputs: bool = True,
        history: HistorySink | None = None,
    ) -> None:
        self._app = app
        self._executor = ActionExecutor(generation, files)
        self.language = language or app.selected_language or fallback_language
        self.fallback_language = fallback_language
        self._history = history
        self._subscribers: list[Subscriber] = []

        self._lock = asyncio.Lock()
        self._bag = ExecutionBag()
        self._states: dict[str, ActionState] = {}
        self._run_state = RunStatus.IDLE
        self._run_error: str | None = None
        self._timestamp: datetime | None = None

        if app.last_execution is not None:
            self._restore(app.last_execution, clean_inputs=clean_inputs)
        self._seed_defaults()

    # -- Properties ------------------------------------------------------------

    @property
    def app(self) -> AppConfig:
        return self._app

    @property
    def run_state(self) -> RunStatus:
        return self._run_state

    @property
    def run_error(self) -> str | None:
        return self._run_error

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def subscribers(self) -> tuple[Subscriber, ...]:
        return tuple(self._subscribers)

    # -- Observers -------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        """Call *callback* after every bag or status change.  Idempotent."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Execution subscriber %r failed", callback)

    # -- Query -----------------------------------------------------------------

    def is_playable(self, index: int) -> PlayableCheck:
        return check_playable(self._action_at(index), self._bag, self.language, self.fallback_language)

    def get_status(self, index: int) -> ActionStatus:
        return self._state_for(self._action_at(index)).status

    def get_action_state(self, index: int) -> ActionState:
        return self._state_for(self._action_at(index)).model_copy(deep=True)

    def get_bag_entry(self, filename: str) -> BagEntry | None:
        return self._bag.get(filename)

    def reference_issues(self) -> list[ReferenceIssue]:
        return find_reference_issues(self._app, self.language, self.fallback_language)

    def snapshot(self) -> Execution:
        """Current bag and action states, ready to store as ``last_execution``."""
        return Execution(
            bag=self._bag.snapshot(),
            action_states={k: v.model_copy(deep=True) for k, v in self._states.items()},
            error=self._run_error,
            timestamp=self._timestamp,
        )

    # -- Inputs ----------------------------------------------------------------

    def set_input_value(self, filename: str, value: str | None, *, path: str | None = None) -> None:
        """Write (or with ``None``, clear) the value of a declared input."""
        self._ensure_idle()
        if self._app.get_input(filename) is None:
            raise UnknownArtifactError(filename)
        if value is None and path is None:
            self._bag.remove(filename)
        else:
            self._bag.set(filename, BagEntry(text_value=value, path=path, language=self.language))
        self._notify()

    def reset_action(self, index: int) -> None:
        """Forget an action's state and remove its output from the bag."""
        self._ensure_idle()
        action = self._action_at(index)
        self._states.pop(action.id, None)
        if action.filename:
            self._bag.remove(action.filename)
        self._notify()

    def load_execution(self, execution: Execution) -> None:
        """Replace the bag and action states with a stored snapshot.

        Input values in the snapshot are kept as they are, including those of
        ``clean_on_startup`` inputs.
        """
        self._ensure_idle()
        self._bag.clear()
        self._states.clear()
        self._run_state = RunStatus.IDLE
        self._run_error = None
        self._timestamp = None
        self._restore(execution, clean_inputs=False)
        self._seed_defaults()
        self._notify()

    # -- Runs ------------------------------------------------------------------

    async def run_action(self, index: int, *, check_dependencies: bool = True) -> RunResult:
        """Run a single action.  Other actions' states are left alone."""
        action = self._action_at(index)
        async with self._lock:
            self._begin_run()
            error = await self._step(action, check_dependencies=check_dependencies)
            if error is not None:
                return self._finish_run(error=error, failed=action)
            return self._finish_run(completed=[action.id])

    async def run_all(self, *, check_dependencies: bool = False) -> RunResult:
        """Run every action in array order, halting on the first failure.

        All action statuses are reset to ``idle`` first (attempt counters are
        kept); the bag is kept so inputs, and earlier outputs until
        overwritten, stay available.
        """
        async with self._lock:
            self._begin_run()
            for action in self._app.actions:
                state = self._state_for(action)
                state.status = ActionStatus.IDLE
                state.error = None
                state.warnings = []

            completed: list[str] = []
            for action in self._app.actions:
                error = await self._step(action, check_dependencies=check_dependencies)
                if error is not None:
                    return self._finish_run(error=error, completed=completed, failed=action)
                completed.append(action.id)
            return self._finish_run(completed=completed)

    # -- Internals -------------------------------------------------------------

    async def _step(self, action: ActionData, *, check_dependencies: bool) -> str | None:
        """Execute one action.  Returns the error message, or ``None`` on success."""
        state = self._state_for(action)
        state.warnings = []

        if check_dependencies:
            check = check_playable(action, self._bag, self.language, self.fallback_language)
            if not check.is_playable:
                return self._fail(state, str(MissingDependencyError(check.missing_dependencies)))

        if not action.filename:
            return self._fail(state, "Action has no output filename")

        template = resolve_localized(action.prompt, self.language, self.fallback_language)
        prompt = substitute(template, self._bag)

        state.status = ActionStatus.LOADING
        state.error = None
        state.attempts += 1
        state.executed_at = datetime.now(UTC)
        self._notify()
        started = time.monotonic()
        try:
            outcome = await self._executor.execute(action, prompt, self._bag)
        except GenerationError as e:
            state.duration_ms = _elapsed_ms(started)
            logger.warning("Action %s (%s) failed: %s", action.id, action.type, e)
            return self._fail(state, str(e))
        except Exception as e:
            state.duration_ms = _elapsed_ms(started)
            logger.exception("Action %s (%s) raised unexpectedly", action.id, action.type)
            return self._fail(state, str(e) or type(e).__name__)

        state.duration_ms = _elapsed_ms(started)
        state.warnings = list(outcome.warnings)
        entry = outcome.entry
        if entry.language is None:
            entry = entry.model_copy(update={"language": self.language})
        self._bag.set(action.filename, entry)
        state.status = ActionStatus.COMPLETE
        logger.info("Action %s completed in %sms -> %s", action.id, state.duration_ms, action.filename)
        self._notify()
        await self._record_history(action)
        return None

    def _fail(self, state: ActionState, message: str) -> str:
        state.status = ActionStatus.ERROR
        state.error = message
        self._notify()
        return message

    def _begin_run(self) -> None:
        self._run_state = RunStatus.RUNNING
        self._run_error = None
        self._notify()

    def _finish_run(
        self,
        *,
        error: str | None = None,
        completed: list[str] | None = None,
        failed: ActionData | None = None,
    ) -> RunResult:
        self._timestamp = datetime.now(UTC)
        self._run_error = error
        self._run_state = RunStatus.ERROR if error is not None else RunStatus.COMPLETE
        if failed is not None:
            logger.warning("Run halted at action %s: %s", failed.id, error)
        self._notify()
        return RunResult(
            status=self._run_state,
            error=error,
            completed_action_ids=list(completed or []),
            failed_action_id=failed.id if failed is not None else None,
        )

    def _state_for(self, action: ActionData) -> ActionState:
        state = self._states.get(action.id)
        if state is None:
            state = self._states[action.id] = ActionState()
        return state

    def _action_at(self, index: int) -> ActionData:
        actions = self._app.actions
        if not 0 <= index < len(actions):
            msg = f"Action index {index} out of range (app has {len(actions)} actions)"
            raise IndexError(msg)
        return actions[index]

    def _ensure_idle(self) -> None:
        if self._lock.locked():
            msg = "A run is in progress"
            raise RunInProgressError(msg)

    async def _record_history(self, action: ActionData) -> None:
        if self._history is None:
            return
        try:
            await self._history(self.snapshot())
        except Exception:
            logger.exception("Could not record execution history after action %s", action.id)

    def _restore(self, execution: Execution, *, clean_inputs: bool = True) -> None:
        """Load a persisted snapshot.

        States for actions that no longer exist are dropped, and an action
        left ``loading`` by an interrupted run is reset to ``idle``.  With
        ``clean_inputs``, inputs flagged ``clean_on_startup`` start empty.
        """
        action_ids = {a.id for a in self._app.actions}
        for action_id, state in execution.action_states.items():
            if action_id not in action_ids:
                continue
            restored = state.model_copy(deep=True)
            if restored.status == ActionStatus.LOADING:
                restored.status = ActionStatus.IDLE
            self._states[action_id] = restored

        cleaned = {i.filename for i in self._app.inputs if i.clean_on_startup} if clean_inputs else set()
        for filename, entry in execution.bag.items():
            if filename not in cleaned:
                self._bag.set(filename, entry)

        self._run_error = execution.error
        self._timestamp = execution.timestamp
        if execution.error is not None:
            self._run_state = RunStatus.ERROR
        elif execution.timestamp is not None:
            self._run_state = RunStatus.COMPLETE

    def _seed_defaults(self) -> None:
        for field_ in self._app.inputs:
            if field_.default_value is None or field_.filename in self._bag:
                continue
            value = field_.default_value
            text = value if isinstance(value, str) else json.dumps(value)
            self._bag.set(field_.filename, BagEntry(text_value=text, language=self.language))


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)

"""App manager -- CRUD for app documents on top of an AppStore.

Store-level failures surface as domain exceptions:

- ``AppNotFoundError`` when ``load_app`` finds no document,
- ``ExecutionNotFoundError`` when a history snapshot is missing,
- ``InvalidAppError`` when a stored or submitted document fails validation,
- ``PersistenceError`` when the backend itself fails (I/O, network).

In-memory app objects are never modified by a failed save.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from loguru import logger
from pydantic import ValidationError

from hector.app_runtime.errors import (
    AppNotFoundError,
    ExecutionNotFoundError,
    InvalidAppError,
    PersistenceError,
)
from hector.app_runtime.localization import DEFAULT_LANGUAGE, create_localizable
from hector.app_runtime.models.app import AppConfig

if TYPE_CHECKING:
    from hector.app_runtime.models.execution import Execution
    from hector.app_runtime.store.base import AppStore

DEFAULT_APP_NAME = "Untitled App"


def default_app(app_id: str | None = None, *, language: str = DEFAULT_LANGUAGE) -> AppConfig:
    """A fresh, empty app."""
    return AppConfig(
        id=app_id or str(uuid.uuid4()),
        name=create_localizable(language, DEFAULT_APP_NAME),
        template="default",
        style="",
        supported_languages=[language],
        selected_language=language,
    )


class AppManager:
    """List, load, save and delete apps.

    Stateless beyond its reference to the app store; safe to share.
    """

    def __init__(self, store: AppStore, *, default_language: str = DEFAULT_LANGUAGE) -> None:
        self._store = store
        self._default_language = default_language

    # -- Read ------------------------------------------------------------------

    async def list_apps(self) -> list[AppConfig]:
        """All readable apps.  Documents that fail to load are skipped."""
        try:
            app_ids = await self._store.list_app_ids()
        except OSError as e:
            msg = f"Failed to list apps: {e}"
            raise PersistenceError(msg) from e

        apps: list[AppConfig] = []
        for app_id in app_ids:
            try:
                apps.append(await self.load_app(app_id))
            except (AppNotFoundError, InvalidAppError, PersistenceError) as e:
                logger.warning("Skipping app {}: {}", app_id, e)
        return apps

    async def load_app(self, app_id: str) -> AppConfig:
        """Load one app.  Raises ``AppNotFoundError`` if it doesn't exist."""
        try:
            return await self._store.read_app(app_id)
        except FileNotFoundError as e:
            raise AppNotFoundError(app_id) from e
        except ValidationError as e:
            msg = f"App '{app_id}' is invalid: {e.error_count()} validation error(s)"
            raise InvalidAppError(msg) from e
        except ValueError as e:
            # Invalid id, or a document that is not JSON at all.
            msg = f"App '{app_id}' could not be loaded: {e}"
            raise InvalidAppError(msg) from e
        except OSError as e:
            msg = f"Failed to read app '{app_id}': {e}"
            raise PersistenceError(msg) from e

    async def get_app(self, app_id: str) -> AppConfig:
        """Load an app, creating and saving a default one if it doesn't exist."""
        try:
            return await self.load_app(app_id)
        except AppNotFoundError:
            app = default_app(app_id, language=self._default_language)
            await self.save_app(app)
            logger.info("Created default app {}", app_id)
            return app

    async def exists(self, app_id: str) -> bool:
        try:
            return await self._store.exists(app_id)
        except OSError as e:
            msg = f"Failed to check app '{app_id}': {e}"
            raise PersistenceError(msg) from e

    # -- Write -----------------------------------------------------------------

    async def create_app(self, *, name: str = DEFAULT_APP_NAME) -> AppConfig:
        """Create and save a new app with a generated id."""
        app = default_app(language=self._default_language)
        app.name = create_localizable(self._default_language, name)
        await self.save_app(app)
        logger.info("Created app {}", app.id)
        return app

    async def save_app(self, app: AppConfig | dict[str, Any]) -> AppConfig:
        """Validate and persist a whole app document (replacing any previous one).

        Accepts a model or a raw (camelCase or snake_case) document.
        """
        validated = self._validate(app)
        try:
            await self._store.write_app(validated)
        except ValueError as e:
            raise InvalidAppError(str(e)) from e
        except OSError as e:
            msg = f"Failed to save app '{validated.id}': {e}"
            raise PersistenceError(msg) from e
        logger.debug("Saved app {}", validated.id)
        return validated

    async def save_execution(self, app: AppConfig, execution: Execution) -> AppConfig:
        """Persist *execution* as the app's ``last_execution``.

        Returns the saved copy; *app* itself is left unchanged.
        """
        return await self.save_app(app.model_copy(update={"last_execution": execution}))

    async def delete_app(self, app_id: str) -> None:
        """Delete an app.  No-op if it doesn't exist."""
        try:
            await self._store.delete(app_id)
        except ValueError as e:
            raise InvalidAppError(str(e)) from e
        except OSError as e:
            msg = f"Failed to delete app '{app_id}': {e}"
            raise PersistenceError(msg) from e
        logger.info("Deleted app {}", app_id)

    # -- Execution history -----------------------------------------------------

    async def record_execution(self, app_id: str, execution: Execution) -> str:
        """Append *execution* to the app's history.  Returns the new execution id.

        Ids start with a UTC timestamp so they sort oldest first.
        """
        execution_id = f"{datetime.now(UTC):%Y%m%dT%H%M%S%fZ}-{uuid.uuid4().hex[:6]}"
        try:
            await self._store.write_execution(app_id, execution_id, execution)
        except ValueError as e:
            raise InvalidAppError(str(e)) from e
        except OSError as e:
            msg = f"Failed to record execution for app '{app_id}': {e}"
            raise PersistenceError(msg) from e
        logger.debug("Recorded execution {} for app {}", execution_id, app_id)
        return execution_id

    async def list_executions(self, app_id: str) -> list[str]:
        """Execution ids of *app_id*, oldest first."""
        try:
            return await self._store.list_execution_ids(app_id)
        except ValueError as e:
            raise InvalidAppError(str(e)) from e
        except OSError as e:
            msg = f"Failed to list executions of app '{app_id}': {e}"
            raise PersistenceError(msg) from e

    async def load_execution(self, app_id: str, execution_id: str) -> Execution:
        try:
            return await self._store.read_execution(app_id, execution_id)
        except FileNotFoundError as e:
            raise ExecutionNotFoundError(app_id, execution_id) from e
        except ValidationError as e:
            msg = f"Execution '{execution_id}' of app '{app_id}' is invalid: {e.error_count()} validation error(s)"
            raise InvalidAppError(msg) from e
        except ValueError as e:
            raise InvalidAppError(str(e)) from e
        except OSError as e:
            msg = f"Failed to read execution '{execution_id}' of app '{app_id}': {e}"
            raise PersistenceError(msg) from e

    # -- Helpers ---------------------------------------------------------------

    @staticmethod
    def _validate(app: AppConfig | dict[str, Any]) -> AppConfig:
        # Round-trip through the document form so model-level validators
        # run on the current field values, not the ones at construction.
        data = app.to_document() if isinstance(app, AppConfig) else app
        try:
            return AppConfig.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid app: {e.error_count()} validation error(s)"
            raise InvalidAppError(msg) from e

"""Action executor -- one handler per action type.

The executor turns a single action plus its already-substituted prompt into a
``BagEntry``.  It never writes the bag; the orchestrator does that after a
successful call.

Handlers are looked up in a table keyed by ``ActionType``, so adding a type
means adding one method and one table entry.  Every failure surfaces as
``GenerationError``:

- the generation service rejected the call or returned an unusable payload,
- the action type has no handler,
- a file-system action is missing its ``path`` (or no file store is wired).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from hector.app_runtime.errors import GenerationError
from hector.app_runtime.models.enums import ActionType
from hector.app_runtime.models.execution import BagEntry

if TYPE_CHECKING:
    from hector.app_runtime.execution.bag import ExecutionBag
    from hector.app_runtime.models.app import ActionData
    from hector.app_runtime.services.base import GenerationService
    from hector.app_runtime.store.base import FileStore

logger = logging.getLogger(__name__)

BEST_MODEL = "Best"
"""Editor placeholder meaning "let the provider choose"."""

DEFAULT_IMAGE_MODEL = "openai:dall-e-3"
DEFAULT_AUDIO_MODEL = "elevenlabs:tts"

# Config keys consumed by the executor itself; everything else is passed
# through to the generation service as options.
_RESERVED_CONFIG_KEYS = frozenset({"model", "schema"})


@dataclass
class ActionOutcome:
    """Result of one successful action: the new bag entry and any soft warnings."""

    entry: BagEntry
    warnings: list[str] = field(default_factory=list)


ActionHandler = Callable[["ActionData", str, "ExecutionBag"], Awaitable[ActionOutcome]]


class ActionExecutor:
    """Dispatch actions to the generation service or the file store."""

    def __init__(self, generation: GenerationService, files: FileStore | None = None) -> None:
        self._generation = generation
        self._files = files
        self._handlers: dict[ActionType, ActionHandler] = {
            ActionType.GENERATE_TEXT: self._generate_text,
            ActionType.GENERATE_JSON: self._generate_json,
            ActionType.GENERATE_IMAGE: self._generate_image,
            ActionType.GENERATE_AUDIO: self._generate_audio,
            ActionType.GENERATE_VIDEO: self._generate_video,
            ActionType.READ_FILE: self._read_file,
            ActionType.WRITE_FILE: self._write_file,
        }

    @property
    def supported_types(self) -> list[ActionType]:
        return list(self._handlers)

    async def execute(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        """Run *action* with the fully substituted *prompt*.

        *bag* is read-only here (``writeFile`` reads its source from it).
        """
        handler = self._handlers.get(action.type)
        if handler is None:
            msg = f"Action type '{action.type}' is not supported"
            raise GenerationError(msg)
        logger.debug("Executing action %s (%s) -> %s", action.id, action.type, action.filename)
        return await handler(action, prompt, bag)

    # -- AI handlers -----------------------------------------------------------

    async def _generate_text(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        result = await self._generation.generate_text(
            prompt=prompt,
            model=_select_model(action.config),
            **_options(action.config),
        )
        return ActionOutcome(BagEntry(text_value=result.text, path=result.path))

    async def _generate_json(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        schema, warning = _parse_schema(action.config.get("schema"))
        if schema is None:
            logger.warning("Action %s: %s", action.id, warning)
            outcome = await self._generate_text(action, prompt, bag)
            outcome.warnings.append(warning)
            return outcome

        result = await self._generation.generate_object(
            prompt=prompt,
            schema=schema,
            model=_select_model(action.config),
            **_options(action.config),
        )
        return ActionOutcome(BagEntry(text_value=json.dumps(result.object, indent=2), path=result.path))

    async def _generate_image(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        result = await self._generation.generate_image(
            prompt=prompt,
            model=_select_model(action.config, DEFAULT_IMAGE_MODEL),
            **_options(action.config),
        )
        return _media_outcome(result.path, result.images, "image")

    async def _generate_audio(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        result = await self._generation.generate_audio(
            prompt=prompt,
            model=_select_model(action.config, DEFAULT_AUDIO_MODEL),
            **_options(action.config),
        )
        return _media_outcome(result.path, result.audios, "audio")

    async def _generate_video(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        result = await self._generation.generate_video(
            prompt=prompt,
            model=_select_model(action.config),
            **_options(action.config),
        )
        return _media_outcome(result.path, [result.video] if result.video else [], "video")

    # -- File-system handlers --------------------------------------------------

    async def _read_file(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        files = self._require_files(action)
        path = _require_path(action)
        try:
            content = await files.read_file(path)
        except FileNotFoundError as e:
            msg = f"File not found: {path}"
            raise GenerationError(msg) from e
        except OSError as e:
            msg = f"Could not read {path}: {e}"
            raise GenerationError(msg) from e
        return ActionOutcome(BagEntry(text_value=content, path=path))

    async def _write_file(self, action: ActionData, prompt: str, bag: ExecutionBag) -> ActionOutcome:
        files = self._require_files(action)
        path = _require_path(action)

        source = action.config.get("source")
        if source:
            content = bag.text_value(source)
            if content is None:
                msg = f"Source artifact '{source}' has no text value"
                raise GenerationError(msg)
        else:
            content = action.config.get("content")
            if not isinstance(content, str):
                msg = "writeFile needs a 'source' artifact or literal 'content'"
                raise GenerationError(msg)

        try:
            await files.write_file(path, content)
        except OSError as e:
            msg = f"Could not write {path}: {e}"
            raise GenerationError(msg) from e
        return ActionOutcome(BagEntry(text_value=content, path=path))

    def _require_files(self, action: ActionData) -> FileStore:
        if self._files is None:
            msg = f"Action type '{action.type}' needs a file store, none is configured"
            raise GenerationError(msg)
        return self._files


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _select_model(config: dict[str, Any], default: str | None = None) -> str | None:
    """Resolve the configured model.  Unset or ``"Best"`` falls back to *default*."""
    model = config.get("model")
    if not model or model == BEST_MODEL:
        return default
    return model


def _options(config: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in config.items() if k not in _RESERVED_CONFIG_KEYS and v is not None}


def _parse_schema(raw: Any) -> tuple[dict[str, Any] | None, str]:
    """Return ``(schema, "")`` or ``(None, warning)`` when the schema is unusable."""
    if isinstance(raw, dict):
        return raw, ""
    if not isinstance(raw, str) or not raw.strip():
        return None, "No JSON schema configured; generated plain text instead"
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        return None, f"Invalid JSON schema ({e.msg}); generated plain text instead"
    if not isinstance(parsed, dict):
        return None, "JSON schema must be an object; generated plain text instead"
    return parsed, ""


def _require_path(action: ActionData) -> str:
    path = action.config.get("path")
    if not isinstance(path, str) or not path:
        msg = f"Action type '{action.type}' needs a 'path' in its config"
        raise GenerationError(msg)
    return path


def _media_outcome(path: str | None, files: list[str], kind: str) -> ActionOutcome:
    location = path or next(iter(files), None)
    if not location:
        msg = f"Generation service returned no {kind} file"
        raise GenerationError(msg)
    return ActionOutcome(BagEntry(text_value=location, path=location))

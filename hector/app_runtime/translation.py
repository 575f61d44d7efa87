"""AI-assisted translation of localizable values.

Translation only fills gaps: a target language that already has non-blank
text is never overwritten, and values with no source text are left alone.
Each translation is one ``generate_object`` call with a ``{"value": str}``
schema.

``translate_app`` walks a whole app definition but leaves its actions and
its last execution untouched; prompts reference artifacts by filename and
are edited by hand.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from hector.app_runtime.errors import GenerationError
from hector.app_runtime.localization import set_localized
from hector.app_runtime.models.app import AppConfig

if TYPE_CHECKING:
    from hector.app_runtime.services.base import GenerationService

logger = logging.getLogger(__name__)

TRANSLATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "value": {
            "type": "string",
            "description": "The translated text",
        },
    },
    "required": ["value"],
}
TRANSLATION_TEMPERATURE = 0.3
MAX_DEPTH = 10

_UNTRANSLATED_APP_FIELDS = ("actions", "last_execution")


async def translate_text(generation: GenerationService, text: str, source: str, target: str) -> str:
    """Translate one string.  Empty text translates to ``""`` without a call."""
    if not text:
        return ""
    prompt = f'Translate the following text from {source} to {target}:\n\n"{text}"'
    result = await generation.generate_object(
        prompt=prompt,
        schema=TRANSLATION_SCHEMA,
        temperature=TRANSLATION_TEMPERATURE,
    )
    value = result.object.get("value") if isinstance(result.object, dict) else None
    if not isinstance(value, str):
        msg = f"Translation to {target} returned no 'value' string"
        raise GenerationError(msg)
    return value


async def translate_localizable(
    generation: GenerationService,
    value: Mapping[str, str] | None,
    source: str,
    target: str,
) -> dict[str, str]:
    """Return a copy of *value* with *target* filled in from *source*.

    Unchanged when *source* has no text or *target* already has some.
    """
    if not value or not value.get(source):
        return dict(value or {})
    existing = value.get(target)
    if existing and existing.strip():
        return dict(value)
    translated = await translate_text(generation, value[source], source, target)
    return set_localized(value, target, translated)


async def translate_tree(
    generation: GenerationService,
    node: Any,
    source: str,
    target: str,
    *,
    strict: bool = True,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> Any:
    """Translate every localizable mapping found in a nested dict/list structure.

    A mapping counts as localizable when its *source* key holds a string.
    Other values are copied as they are; nesting deeper than *max_depth* is
    returned untranslated.  With ``strict=False`` a failed translation is
    logged and the original value kept.
    """
    if depth > max_depth or not isinstance(node, (dict, list)):
        return node

    if isinstance(node, list):
        return [
            await translate_tree(
                generation, item, source, target, strict=strict, depth=depth + 1, max_depth=max_depth
            )
            for item in node
        ]

    if isinstance(node.get(source), str):
        try:
            return await translate_localizable(generation, node, source, target)
        except GenerationError as e:
            if strict:
                raise
            logger.warning("Keeping untranslated value %r: %s", node.get(source), e)
            return dict(node)

    return {
        key: await translate_tree(
            generation, child, source, target, strict=strict, depth=depth + 1, max_depth=max_depth
        )
        for key, child in node.items()
    }


async def translate_app(
    generation: GenerationService,
    app: AppConfig,
    source: str,
    target: str,
) -> AppConfig:
    """Return a copy of *app* with its localizable texts translated to *target*.

    Actions and the last execution are carried over unchanged.  *target* is
    added to ``supported_languages`` if missing.  A failed translation of one
    field is logged and that field left as it was.
    """
    data = app.model_dump()
    kept = {name: data.pop(name) for name in _UNTRANSLATED_APP_FIELDS}

    translated = await translate_tree(generation, data, source, target, strict=False)
    translated.update(kept)
    if target not in translated["supported_languages"]:
        translated["supported_languages"] = [*translated["supported_languages"], target]

    logger.info("Translated app %s from %s to %s", app.id, source, target)
    return AppConfig.model_validate(translated)

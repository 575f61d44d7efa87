"""Action catalog.

Static description of every action type the runtime can execute: display
label, output file extension, category and the default ``config`` a new
action starts with.  Also derives an action's output filename from its title.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from hector.app_runtime.localization import DEFAULT_LANGUAGE, create_localizable, resolve_localized
from hector.app_runtime.models.app import ActionData, AppConfig, Localizable
from hector.app_runtime.models.enums import ActionCategory, ActionType

MAX_FILENAME_STEM = 30

_DEFAULT_SCHEMA = '{\n  "type": "object",\n  "properties": {\n    "example": {\n      "type": "string"\n    }\n  }\n}'


@dataclass(frozen=True)
class ActionSpec:
    type: ActionType
    label: str
    description: str
    file_extension: str
    category: ActionCategory
    default_config: dict[str, Any] = field(default_factory=dict)


ACTION_CATALOG: dict[ActionType, ActionSpec] = {
    ActionType.GENERATE_TEXT: ActionSpec(
        type=ActionType.GENERATE_TEXT,
        label="Generate Text",
        description="Generate text content using AI models",
        file_extension=".md",
        category=ActionCategory.AI,
        default_config={"model": "Best", "temperature": 0.7, "maxTokens": 500},
    ),
    ActionType.GENERATE_JSON: ActionSpec(
        type=ActionType.GENERATE_JSON,
        label="Generate JSON",
        description="Generate structured JSON data",
        file_extension=".json",
        category=ActionCategory.AI,
        default_config={"model": "Best", "temperature": 0.7, "schema": _DEFAULT_SCHEMA},
    ),
    ActionType.GENERATE_IMAGE: ActionSpec(
        type=ActionType.GENERATE_IMAGE,
        label="Generate Image",
        description="Generate image content using AI models",
        file_extension=".png",
        category=ActionCategory.AI,
        default_config={"model": "Best", "size": "512x512", "n": 1},
    ),
    ActionType.GENERATE_AUDIO: ActionSpec(
        type=ActionType.GENERATE_AUDIO,
        label="Generate Audio",
        description="Generate audio content using AI models",
        file_extension=".mp3",
        category=ActionCategory.AI,
        default_config={"model": "Best"},
    ),
    ActionType.GENERATE_VIDEO: ActionSpec(
        type=ActionType.GENERATE_VIDEO,
        label="Generate Video",
        description="Generate video content using AI models",
        file_extension=".mp4",
        category=ActionCategory.AI,
        default_config={"model": "Best"},
    ),
    ActionType.READ_FILE: ActionSpec(
        type=ActionType.READ_FILE,
        label="Read File",
        description="Read a text file into the bag",
        file_extension=".md",
        category=ActionCategory.FILE_SYSTEM,
        default_config={"path": ""},
    ),
    ActionType.WRITE_FILE: ActionSpec(
        type=ActionType.WRITE_FILE,
        label="Write File",
        description="Write an artifact (or literal content) to a file",
        file_extension=".md",
        category=ActionCategory.FILE_SYSTEM,
        default_config={"path": "", "source": ""},
    ),
}


def derive_action_filename(title: str, action_type: ActionType, existing: Iterable[str]) -> str:
    """Build ``<stem><ext>`` from *title*, unique among *existing* filenames.

    The stem is the lowercased title with whitespace runs turned into ``_``,
    everything outside ``[a-z0-9_]`` dropped, cut to 30 characters.  On a
    collision ``_N`` is appended, one past the highest suffix in use.
    Returns ``""`` when the title yields no usable stem.
    """
    stem = re.sub(r"\s+", "_", title.lower())
    stem = re.sub(r"[^a-z0-9_]", "", stem)[:MAX_FILENAME_STEM]
    if not stem:
        return ""

    extension = ACTION_CATALOG[action_type].file_extension
    taken = set(existing)
    candidate = f"{stem}{extension}"
    if candidate not in taken:
        return candidate

    suffix_re = re.compile(rf"^{re.escape(stem)}_(\d+){re.escape(extension)}$")
    suffixes = [int(m.group(1)) for name in taken if (m := suffix_re.match(name))]
    return f"{stem}_{max(suffixes, default=0) + 1}{extension}"


def taken_filenames(app: AppConfig, exclude_action_id: str | None = None) -> list[str]:
    """All artifact names in use by *app*, optionally ignoring one action."""
    names = app.input_filenames()
    names.extend(a.filename for a in app.actions if a.filename and a.id != exclude_action_id)
    return names


def new_action(
    app: AppConfig,
    action_type: ActionType,
    title: str | Localizable,
    *,
    lang: str = DEFAULT_LANGUAGE,
    prompt: str | Localizable | None = None,
) -> ActionData:
    """Create an action with catalog defaults and a derived, unique filename.

    The action is not appended to *app*.
    """
    titles = create_localizable(lang, title) if isinstance(title, str) else dict(title)
    prompts = create_localizable(lang, prompt) if isinstance(prompt, str) else dict(prompt or {})
    entry = ACTION_CATALOG[action_type]
    filename = derive_action_filename(resolve_localized(titles, lang) or "", action_type, taken_filenames(app))
    return ActionData(
        type=action_type,
        title=titles,
        filename=filename,
        prompt=prompts,
        config=dict(entry.default_config),
    )


def rename_action(app: AppConfig, action: ActionData, title: str, *, lang: str = DEFAULT_LANGUAGE) -> ActionData:
    """Return a copy of *action* with a new title and a re-derived filename."""
    titles = {**action.title, lang: title}
    filename = derive_action_filename(title, action.type, taken_filenames(app, exclude_action_id=action.id))
    return action.model_copy(update={"title": titles, "filename": filename})

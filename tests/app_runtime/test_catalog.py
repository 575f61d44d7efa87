"""Unit tests for the action catalog and filename derivation."""

from __future__ import annotations

import pytest
from fakes import make_app, make_text_action

from hector.app_runtime.catalog import (
    ACTION_CATALOG,
    MAX_FILENAME_STEM,
    derive_action_filename,
    new_action,
    rename_action,
)
from hector.app_runtime.models.app import ARTIFACT_FILENAME_RE
from hector.app_runtime.models.enums import ActionCategory, ActionType


def test_catalog_covers_every_action_type() -> None:
    assert set(ACTION_CATALOG) == set(ActionType)
    assert ACTION_CATALOG[ActionType.READ_FILE].category == ActionCategory.FILE_SYSTEM
    assert ACTION_CATALOG[ActionType.GENERATE_TEXT].category == ActionCategory.AI


@pytest.mark.parametrize(
    ("action_type", "expected"),
    [
        (ActionType.GENERATE_TEXT, "my_story.md"),
        (ActionType.GENERATE_JSON, "my_story.json"),
        (ActionType.GENERATE_IMAGE, "my_story.png"),
        (ActionType.GENERATE_AUDIO, "my_story.mp3"),
        (ActionType.GENERATE_VIDEO, "my_story.mp4"),
    ],
)
def test_extension_by_type(action_type: ActionType, expected: str) -> None:
    assert derive_action_filename("My Story", action_type, []) == expected


def test_title_normalization() -> None:
    assert derive_action_filename("  Hero's   Journey!! ", ActionType.GENERATE_TEXT, []) == "_heros_journey_.md"
    assert derive_action_filename("Café au lait", ActionType.GENERATE_TEXT, []) == "caf_au_lait.md"


def test_stem_is_truncated() -> None:
    filename = derive_action_filename("a" * 50, ActionType.GENERATE_TEXT, [])
    assert filename == "a" * MAX_FILENAME_STEM + ".md"


def test_empty_stem_gives_empty_filename() -> None:
    assert derive_action_filename("", ActionType.GENERATE_TEXT, []) == ""
    assert derive_action_filename("!!!", ActionType.GENERATE_TEXT, []) == ""


def test_collision_gets_next_suffix() -> None:
    existing = ["story.md", "story_1.md", "story_3.md", "story.png"]
    assert derive_action_filename("Story", ActionType.GENERATE_TEXT, existing) == "story_4.md"
    assert derive_action_filename("Story", ActionType.GENERATE_IMAGE, existing) == "story_1.png"
    assert derive_action_filename("Story", ActionType.GENERATE_TEXT, ["story.md"]) == "story_1.md"


def test_derived_names_are_referenceable() -> None:
    filename = derive_action_filename("Story", ActionType.GENERATE_TEXT, ["story.md"])
    assert ARTIFACT_FILENAME_RE.match(filename)


def test_new_action_uses_defaults_and_avoids_inputs() -> None:
    app = make_app(inputs=["story.md"], actions=[make_text_action("story_1.md", "p")])

    action = new_action(app, ActionType.GENERATE_TEXT, "Story", prompt="About @name.md")

    assert action.filename == "story_2.md"
    assert action.title == {"en-US": "Story"}
    assert action.prompt == {"en-US": "About @name.md"}
    assert action.config == {"model": "Best", "temperature": 0.7, "maxTokens": 500}
    assert action not in app.actions


def test_new_action_config_is_a_copy() -> None:
    action = new_action(make_app(), ActionType.GENERATE_IMAGE, "Cover")
    action.config["size"] = "1024x1024"
    assert ACTION_CATALOG[ActionType.GENERATE_IMAGE].default_config["size"] == "512x512"


def test_rename_action_ignores_its_own_filename() -> None:
    action = make_text_action("story.md", "p")
    app = make_app(actions=[action])

    renamed = rename_action(app, action, "Story", lang="pt-BR")

    assert renamed.filename == "story.md"
    assert renamed.title == {"en-US": "story.md", "pt-BR": "Story"}
    assert renamed.id == action.id

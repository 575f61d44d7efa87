"""Unit tests for playability and reference ordering checks."""

from __future__ import annotations

from fakes import make_app, make_text_action

from hector.app_runtime.execution.bag import ExecutionBag
from hector.app_runtime.execution.dependencies import (
    ReferenceIssueKind,
    action_references,
    check_playable,
    find_reference_issues,
)
from hector.app_runtime.models.app import ActionData
from hector.app_runtime.models.enums import ActionType
from hector.app_runtime.models.execution import BagEntry

# ---------------------------------------------------------------------------
# check_playable
# ---------------------------------------------------------------------------


def test_playable_without_references() -> None:
    action = make_text_action("story.md", "Tell a story")
    check = check_playable(action, ExecutionBag(), "en-US")
    assert check.is_playable is True
    assert check.missing_dependencies == []


def test_missing_dependencies_listed_in_order() -> None:
    action = make_text_action("story.md", "About @name.md in @style.md")
    check = check_playable(action, ExecutionBag(), "en-US")
    assert check.is_playable is False
    assert check.missing_dependencies == ["name.md", "style.md"]


def test_populating_missing_keys_makes_playable() -> None:
    action = make_text_action("story.md", "About @name.md in @style.md")
    bag = ExecutionBag()
    bag.set("name.md", BagEntry(text_value="Ana"))
    assert check_playable(action, bag, "en-US").missing_dependencies == ["style.md"]

    bag.set("style.md", BagEntry(text_value="noir"))
    assert check_playable(action, bag, "en-US").is_playable is True


def test_entry_without_text_counts_as_missing() -> None:
    action = make_text_action("caption.md", "Caption for @cover.png")
    bag = ExecutionBag({"cover.png": BagEntry(path="/out/cover.png")})
    assert check_playable(action, bag, "en-US").missing_dependencies == ["cover.png"]


def test_check_uses_localized_prompt() -> None:
    action = ActionData(
        id="a1",
        type=ActionType.GENERATE_TEXT,
        filename="story.md",
        prompt={"en-US": "About @name.md", "pt-BR": "Sobre @nome.md"},
    )
    assert check_playable(action, ExecutionBag(), "pt-BR").missing_dependencies == ["nome.md"]
    assert check_playable(action, ExecutionBag(), "fr-FR").missing_dependencies == ["name.md"]


def test_check_does_not_mutate_bag() -> None:
    bag = ExecutionBag({"name.md": BagEntry(text_value="Ana")})
    check_playable(make_text_action("story.md", "@name.md @other.md"), bag, "en-US")
    assert bag.filenames() == ["name.md"]


# ---------------------------------------------------------------------------
# File-system actions
# ---------------------------------------------------------------------------


def test_write_file_depends_on_source() -> None:
    action = ActionData(
        id="w1",
        type=ActionType.WRITE_FILE,
        filename="saved.md",
        prompt={"en-US": "@ignored.md"},
        config={"path": "out/story.md", "source": "story.md"},
    )
    assert action_references(action, "en-US") == ["story.md"]
    assert check_playable(action, ExecutionBag(), "en-US").missing_dependencies == ["story.md"]


def test_read_file_has_no_dependencies() -> None:
    action = ActionData(id="r1", type=ActionType.READ_FILE, filename="notes.md", config={"path": "notes.md"})
    assert action_references(action, "en-US") == []


# ---------------------------------------------------------------------------
# find_reference_issues
# ---------------------------------------------------------------------------


def test_valid_ordering_has_no_issues() -> None:
    app = make_app(
        inputs=["name.md"],
        actions=[
            make_text_action("story.md", "About @name.md"),
            make_text_action("title.md", "Title for @story.md"),
        ],
    )
    assert find_reference_issues(app, "en-US") == []


def test_forward_self_and_unknown_references() -> None:
    app = make_app(
        inputs=["name.md"],
        actions=[
            make_text_action("story.md", "About @name.md using @title.md"),
            make_text_action("title.md", "Title for @title.md and @ghost.md"),
        ],
    )
    issues = find_reference_issues(app, "en-US")
    assert [(i.action_id, i.reference, i.kind) for i in issues] == [
        ("story", "title.md", ReferenceIssueKind.FORWARD_REFERENCE),
        ("title", "title.md", ReferenceIssueKind.SELF_REFERENCE),
        ("title", "ghost.md", ReferenceIssueKind.UNKNOWN_ARTIFACT),
    ]
    assert "later action" in issues[0].message


def test_two_action_cycle_is_reported() -> None:
    app = make_app(
        actions=[
            make_text_action("a.md", "from @b.md"),
            make_text_action("b.md", "from @a.md"),
        ],
    )
    issues = find_reference_issues(app, "en-US")
    assert [i.kind for i in issues] == [ReferenceIssueKind.FORWARD_REFERENCE]

"""Unit tests for AI-assisted translation of localizable values."""

from __future__ import annotations

import pytest
from fakes import FakeGenerationService, make_app, make_text_action

from hector.app_runtime.errors import GenerationError
from hector.app_runtime.models.app import InputField, SelectOption
from hector.app_runtime.models.execution import BagEntry, Execution
from hector.app_runtime.translation import (
    TRANSLATION_SCHEMA,
    TRANSLATION_TEMPERATURE,
    translate_app,
    translate_localizable,
    translate_text,
    translate_tree,
)

_PT = {"Story Maker": "Criador de Historias", "Name": "Nome", "Hero": "Heroi", "Villain": "Vilao"}


def _source_text(prompt: str) -> str:
    return prompt.rsplit("\n\n", 1)[1].strip('"')


@pytest.fixture
def translator(generation: FakeGenerationService) -> FakeGenerationService:
    generation.object_for = lambda prompt: {"value": _PT.get(_source_text(prompt), f"pt:{_source_text(prompt)}")}
    return generation


# ---------------------------------------------------------------------------
# translate_text / translate_localizable
# ---------------------------------------------------------------------------


async def test_translate_text_calls_generate_object(translator: FakeGenerationService) -> None:
    result = await translate_text(translator, "Name", "en-US", "pt-BR")

    assert result == "Nome"
    method, kwargs = translator.calls[0]
    assert method == "generate_object"
    assert kwargs["prompt"] == 'Translate the following text from en-US to pt-BR:\n\n"Name"'
    assert kwargs["schema"] == TRANSLATION_SCHEMA
    assert kwargs["temperature"] == TRANSLATION_TEMPERATURE


async def test_translate_empty_text_skips_call(translator: FakeGenerationService) -> None:
    assert await translate_text(translator, "", "en-US", "pt-BR") == ""
    assert translator.calls == []


async def test_translate_text_rejects_missing_value(generation: FakeGenerationService) -> None:
    generation.object = {"text": "Nome"}
    with pytest.raises(GenerationError, match="no 'value'"):
        await translate_text(generation, "Name", "en-US", "pt-BR")


async def test_translate_localizable_fills_missing_target(translator: FakeGenerationService) -> None:
    value = {"en-US": "Name"}

    result = await translate_localizable(translator, value, "en-US", "pt-BR")

    assert result == {"en-US": "Name", "pt-BR": "Nome"}
    assert value == {"en-US": "Name"}


@pytest.mark.parametrize(
    "value",
    [
        {"en-US": "Name", "pt-BR": "Nome proprio"},
        {"pt-BR": "Nome"},
        {"en-US": ""},
        None,
    ],
)
async def test_translate_localizable_leaves_value(translator: FakeGenerationService, value) -> None:
    result = await translate_localizable(translator, value, "en-US", "pt-BR")

    assert result == (value or {})
    assert translator.calls == []


async def test_translate_localizable_overwrites_blank_target(translator: FakeGenerationService) -> None:
    result = await translate_localizable(translator, {"en-US": "Name", "pt-BR": "  "}, "en-US", "pt-BR")
    assert result["pt-BR"] == "Nome"


# ---------------------------------------------------------------------------
# translate_tree
# ---------------------------------------------------------------------------


async def test_translate_tree_walks_nested_values(translator: FakeGenerationService) -> None:
    tree = {
        "title": {"en-US": "Name"},
        "options": [{"value": "hero", "label": {"en-US": "Hero"}}],
        "count": 3,
    }

    result = await translate_tree(translator, tree, "en-US", "pt-BR")

    assert result == {
        "title": {"en-US": "Name", "pt-BR": "Nome"},
        "options": [{"value": "hero", "label": {"en-US": "Hero", "pt-BR": "Heroi"}}],
        "count": 3,
    }


async def test_translate_tree_depth_limit(translator: FakeGenerationService) -> None:
    tree = {"a": {"b": {"title": {"en-US": "Name"}}}}

    result = await translate_tree(translator, tree, "en-US", "pt-BR", max_depth=1)

    assert result == tree
    assert translator.calls == []


async def test_translate_tree_strict_raises(translator: FakeGenerationService) -> None:
    translator.fail_on = {'Translate the following text from en-US to pt-BR:\n\n"Name"'}
    with pytest.raises(GenerationError):
        await translate_tree(translator, {"title": {"en-US": "Name"}}, "en-US", "pt-BR")


# ---------------------------------------------------------------------------
# translate_app
# ---------------------------------------------------------------------------


async def test_translate_app(translator: FakeGenerationService) -> None:
    action = make_text_action("story.md", "Tell a story about @name.md")
    app = make_app(
        actions=[action],
        last_execution=Execution(bag={"name.md": BagEntry(text_value="Ana")}),
    ).model_copy(
        update={
            "inputs": [
                InputField(
                    filename="name.md",
                    title={"en-US": "Name"},
                    options=[SelectOption(value="villain", label={"en-US": "Villain"})],
                )
            ]
        }
    )

    translated = await translate_app(translator, app, "en-US", "pt-BR")

    assert translated.name == {"en-US": "Story Maker", "pt-BR": "Criador de Historias"}
    assert translated.inputs[0].title["pt-BR"] == "Nome"
    assert translated.inputs[0].options[0].label["pt-BR"] == "Vilao"
    assert translated.supported_languages == ["en-US", "pt-BR"]
    # Actions and the last execution are carried over as they are.
    assert translated.actions == app.actions
    assert translated.last_execution == app.last_execution
    assert all("Tell a story" not in p for p in translator.prompts)
    # Input is not modified.
    assert app.name == {"en-US": "Story Maker"}


async def test_translate_app_keeps_field_on_failure(translator: FakeGenerationService) -> None:
    translator.fail_on = {'Translate the following text from en-US to pt-BR:\n\n"Story Maker"'}
    app = make_app(inputs=["name.md"])

    translated = await translate_app(translator, app, "en-US", "pt-BR")

    assert translated.name == {"en-US": "Story Maker"}
    assert translated.inputs[0].title == {"en-US": "name.md", "pt-BR": "pt:name.md"}

"""App definition models.

An app is a list of typed inputs, an ordered list of actions and an output
template.  The whole ``AppConfig`` (including the last execution snapshot) is
persisted as a single JSON document keyed by ``id``.
"""

from __future__ import annotations

import re
import uuid
from typing import Any

from pydantic import Field, field_validator, model_validator

from hector.app_runtime.models.base import DocumentModel
from hector.app_runtime.models.enums import ActionType, InputType, OutputTemplateType
from hector.app_runtime.models.execution import Execution

Localizable = dict[str, str]
"""Language code -> text.  Keys need not cover every supported language."""

ARTIFACT_FILENAME_RE = re.compile(r"^[A-Za-z0-9_]+\.[A-Za-z0-9]+$")

# -- Inputs ------------------------------------------------------------------


class SelectOption(DocumentModel):
    value: str
    label: Localizable = Field(default_factory=dict)


class InputField(DocumentModel):
    """A user-facing input whose value lands in the bag under ``filename``."""

    filename: str
    type: InputType = InputType.TEXT
    title: Localizable = Field(default_factory=dict)
    required: bool = False
    placeholder: Localizable | None = None
    description: Localizable | None = None
    multi_value: bool = False
    clean_on_startup: bool = False
    options: list[SelectOption] | None = None
    default_value: Any = None

    @field_validator("filename")
    @classmethod
    def _check_filename(cls, value: str) -> str:
        if not ARTIFACT_FILENAME_RE.match(value):
            msg = f"Input filename '{value}' must look like 'name.ext' (letters, digits, underscore)"
            raise ValueError(msg)
        return value


# -- Actions -----------------------------------------------------------------


class ActionData(DocumentModel):
    """One generation (or file-system) step of an app."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: ActionType
    title: Localizable = Field(default_factory=dict)
    description: Localizable | None = None
    filename: str = Field(default="", description="Output artifact name, e.g. 'story.md'")
    prompt: Localizable = Field(default_factory=dict)
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("filename")
    @classmethod
    def _check_filename(cls, value: str) -> str:
        # Empty means "not chosen yet"; the orchestrator refuses to run it.
        if value and not ARTIFACT_FILENAME_RE.match(value):
            msg = f"Action filename '{value}' must look like 'name.ext' (letters, digits, underscore)"
            raise ValueError(msg)
        return value


# -- Output ------------------------------------------------------------------


class OutputTemplate(DocumentModel):
    """Story-style output: artifact filenames to render as background, body and audio."""

    type: OutputTemplateType = OutputTemplateType.STORY
    title: Localizable = Field(default_factory=dict)
    background_image: str | None = None
    content: str | None = None
    audio: str | None = None


# -- App ---------------------------------------------------------------------


class AppConfig(DocumentModel):
    """Full app definition as stored in the app store."""

    id: str
    name: Localizable
    template: str = "default"
    style: str = ""
    inputs: list[InputField] = Field(default_factory=list)
    actions: list[ActionData] = Field(default_factory=list)
    output: list[OutputTemplate] = Field(default_factory=list)
    supported_languages: list[str] = Field(default_factory=list)
    selected_language: str | None = None
    last_execution: Execution | None = None

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value:
            msg = "App id must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: Localizable) -> Localizable:
        if not value:
            msg = "App name needs a value for at least one language"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_unique_artifacts(self) -> AppConfig:
        """Input filenames and action output filenames share one namespace."""
        seen: set[str] = set()
        names = [i.filename for i in self.inputs] + [a.filename for a in self.actions if a.filename]
        for name in names:
            if name in seen:
                msg = f"Duplicate artifact filename '{name}'"
                raise ValueError(msg)
            seen.add(name)
        return self

    # -- Lookups ---------------------------------------------------------------

    def input_filenames(self) -> list[str]:
        return [i.filename for i in self.inputs]

    def get_input(self, filename: str) -> InputField | None:
        return next((i for i in self.inputs if i.filename == filename), None)

    def get_action(self, action_id: str) -> ActionData | None:
        return next((a for a in self.actions if a.id == action_id), None)

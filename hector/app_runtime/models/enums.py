"""Shared enumerations used across the app runtime."""

from __future__ import annotations

from enum import StrEnum

# -- Inputs ------------------------------------------------------------------


class InputType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    SELECT = "select"
    FILE = "file"
    AUDIO = "audio"


# -- Actions -----------------------------------------------------------------


class ActionType(StrEnum):
    """Closed set of action variants.  Values match the persisted documents."""

    GENERATE_TEXT = "generateText"
    GENERATE_JSON = "generateJSON"
    GENERATE_IMAGE = "generateImage"
    GENERATE_AUDIO = "generateAudio"
    GENERATE_VIDEO = "generateVideo"
    READ_FILE = "readFile"
    WRITE_FILE = "writeFile"


class ActionCategory(StrEnum):
    AI = "AI"
    FILE_SYSTEM = "FileSystem"


# -- Execution ---------------------------------------------------------------


class ActionStatus(StrEnum):
    """Per-action status shown next to each action in the editor."""

    IDLE = "idle"
    LOADING = "loading"
    COMPLETE = "complete"
    ERROR = "error"


class RunStatus(StrEnum):
    """Orchestrator run state: ``idle -> running -> complete | error``."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"


# -- Output ------------------------------------------------------------------


class OutputTemplateType(StrEnum):
    STORY = "Story"

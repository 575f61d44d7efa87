"""Data models for the app runtime."""

from hector.app_runtime.models.app import (
    ActionData,
    AppConfig,
    InputField,
    Localizable,
    OutputTemplate,
    SelectOption,
)
from hector.app_runtime.models.enums import (
    ActionCategory,
    ActionStatus,
    ActionType,
    InputType,
    OutputTemplateType,
    RunStatus,
)
from hector.app_runtime.models.execution import ActionState, BagEntry, Execution

__all__ = [
    # App
    "ActionCategory",
    "ActionData",
    "ActionState",
    # Enums
    "ActionStatus",
    "ActionType",
    "AppConfig",
    # Execution
    "BagEntry",
    "Execution",
    "InputField",
    "InputType",
    "Localizable",
    "OutputTemplate",
    "OutputTemplateType",
    "RunStatus",
    "SelectOption",
]

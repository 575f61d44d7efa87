"""Dependency checks for actions.

Two checks live here:

- **check_playable**: runtime check against the current bag.  An action is
  playable when every artifact its prompt references has a text value.
  Advisory only -- it gates the "Play" affordance and optionally a run, but
  never mutates anything.
- **find_reference_issues**: static check of the ordering rule.  Array order
  is the only dependency ordering, so an action may reference declared inputs
  and outputs of *earlier* actions only.  Any reference cycle necessarily
  contains a self or forward reference, so this also covers cycle detection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from hector.app_runtime.execution.variables import extract_references
from hector.app_runtime.localization import DEFAULT_LANGUAGE, resolve_localized
from hector.app_runtime.models.enums import ActionType

if TYPE_CHECKING:
    from hector.app_runtime.execution.bag import ExecutionBag
    from hector.app_runtime.models.app import ActionData, AppConfig

FILE_SYSTEM_ACTIONS = frozenset({ActionType.READ_FILE, ActionType.WRITE_FILE})


@dataclass(frozen=True)
class PlayableCheck:
    is_playable: bool
    missing_dependencies: list[str] = field(default_factory=list)


class ReferenceIssueKind(StrEnum):
    SELF_REFERENCE = "self_reference"
    FORWARD_REFERENCE = "forward_reference"
    UNKNOWN_ARTIFACT = "unknown_artifact"


@dataclass(frozen=True)
class ReferenceIssue:
    action_id: str
    reference: str
    kind: ReferenceIssueKind

    @property
    def message(self) -> str:
        match self.kind:
            case ReferenceIssueKind.SELF_REFERENCE:
                return f"Action references its own output '{self.reference}'"
            case ReferenceIssueKind.FORWARD_REFERENCE:
                return f"'{self.reference}' is produced by a later action"
            case _:
                return f"'{self.reference}' is not an input or an action output"


def action_references(
    action: ActionData,
    lang: str,
    fallback: str = DEFAULT_LANGUAGE,
) -> list[str]:
    """Artifacts an action reads.

    AI actions read whatever their localized prompt references.  File-system
    actions have no prompt; ``writeFile`` reads the artifact named by
    ``config["source"]`` when set.
    """
    if action.type in FILE_SYSTEM_ACTIONS:
        source = action.config.get("source")
        if action.type == ActionType.WRITE_FILE and isinstance(source, str) and source:
            return [source]
        return []
    return extract_references(resolve_localized(action.prompt, lang, fallback))


def check_playable(
    action: ActionData,
    bag: ExecutionBag,
    lang: str,
    fallback: str = DEFAULT_LANGUAGE,
) -> PlayableCheck:
    """Report which referenced artifacts have no text value in *bag*."""
    missing = [ref for ref in action_references(action, lang, fallback) if not bag.has_text(ref)]
    return PlayableCheck(is_playable=not missing, missing_dependencies=missing)


def find_reference_issues(
    app: AppConfig,
    lang: str,
    fallback: str = DEFAULT_LANGUAGE,
) -> list[ReferenceIssue]:
    """Check every action's references against the inputs and earlier outputs."""
    inputs = set(app.input_filenames())
    producer_index = {a.filename: i for i, a in enumerate(app.actions) if a.filename}

    issues: list[ReferenceIssue] = []
    for index, action in enumerate(app.actions):
        for ref in action_references(action, lang, fallback):
            if ref == action.filename:
                kind = ReferenceIssueKind.SELF_REFERENCE
            elif ref in inputs:
                continue
            elif ref in producer_index:
                if producer_index[ref] < index:
                    continue
                kind = ReferenceIssueKind.FORWARD_REFERENCE
            else:
                kind = ReferenceIssueKind.UNKNOWN_ARTIFACT
            issues.append(ReferenceIssue(action_id=action.id, reference=ref, kind=kind))
    return issues

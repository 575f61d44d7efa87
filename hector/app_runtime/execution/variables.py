"""Prompt variable references (``@name.ext``).

Prompts reference artifacts by filename with an ``@`` prefix::

    Tell a story about @name.md in the style of @style_guide.md

``name`` is letters, digits and underscore; ``ext`` is letters and digits.
The bag is keyed by the bare filename (no ``@``).

Substitution is a single left-to-right pass over the original prompt.  Text
introduced by a substituted value is never scanned again, so a value that
itself contains ``@other.md`` stays literal and cyclic references cannot loop.
Unresolved tokens are left untouched so partially-filled prompts stay
readable and can be resolved later.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hector.app_runtime.execution.bag import ExecutionBag

VARIABLE_RE = re.compile(r"@([A-Za-z0-9_]+\.[A-Za-z0-9]+)")


def extract_references(prompt: str | None) -> list[str]:
    """Return referenced filenames in order of first appearance, without duplicates."""
    if not prompt:
        return []
    seen: dict[str, None] = {}
    for match in VARIABLE_RE.finditer(prompt):
        seen.setdefault(match.group(1), None)
    return list(seen)


def substitute(prompt: str | None, bag: ExecutionBag) -> str:
    """Replace each ``@name.ext`` with the text value of ``name.ext`` in *bag*.

    Tokens whose artifact is absent, or present without a text value, are
    left as-is.
    """
    if not prompt:
        return ""

    def _replace(match: re.Match[str]) -> str:
        value = bag.text_value(match.group(1))
        return value if value is not None else match.group(0)

    return VARIABLE_RE.sub(_replace, prompt)

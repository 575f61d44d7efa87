"""Execution bag -- the shared namespace of named artifacts.

Maps artifact filename (``name.md``, ``story.md``, ``cover.png``) to its
current ``BagEntry``.  Inputs are written by the user; action outputs are
written by the orchestrator's step function, which is the only writer while
a run is in progress.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from hector.app_runtime.models.execution import BagEntry


class ExecutionBag:
    """Mutable mapping of artifact filename -> ``BagEntry``.

    Writes always replace the whole entry; there is no partial merge.
    Entries handed out by ``get`` are copies, so callers cannot mutate the
    bag behind the orchestrator's back.
    """

    def __init__(self, entries: Mapping[str, BagEntry] | None = None) -> None:
        self._entries: dict[str, BagEntry] = {}
        for name, entry in (entries or {}).items():
            self._entries[name] = entry.model_copy(deep=True)

    # -- Query -----------------------------------------------------------------

    def get(self, filename: str) -> BagEntry | None:
        entry = self._entries.get(filename)
        return entry.model_copy() if entry is not None else None

    def text_value(self, filename: str) -> str | None:
        """Text value of *filename*, or ``None`` if absent or not textual."""
        entry = self._entries.get(filename)
        return entry.text_value if entry is not None else None

    def has_text(self, filename: str) -> bool:
        return self.text_value(filename) is not None

    def filenames(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, filename: object) -> bool:
        return filename in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    # -- Mutation --------------------------------------------------------------

    def set(self, filename: str, entry: BagEntry) -> None:
        """Replace the entry for *filename*."""
        self._entries[filename] = entry.model_copy(deep=True)

    def remove(self, filename: str) -> BagEntry | None:
        return self._entries.pop(filename, None)

    def clear(self) -> None:
        self._entries.clear()

    # -- Snapshot --------------------------------------------------------------

    def snapshot(self) -> dict[str, BagEntry]:
        """Deep copy of all entries, suitable for persisting."""
        return {name: entry.model_copy(deep=True) for name, entry in self._entries.items()}

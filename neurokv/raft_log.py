"""Replicated log storage following the Raft consistency rules."""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Iterator, TypeVar

C = TypeVar("C")


class LogError(Exception):
    """Raised when a log operation cannot be carried out."""


class IndexOutOfBoundsError(LogError, IndexError):
    """Raised when an index does not refer to an entry in the log."""

    def __init__(self, index: int) -> None:
        super().__init__(f"index {index} out of bounds")
        self.index = index


class AppendOutcome(enum.Enum):
    """Result of an append request."""

    SUCCESS = "success"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Entry(Generic[C]):
    """A single log entry: a command and the term it was created in."""

    command: C
    term: int


def _as_index(value: Any) -> int:
    try:
        index = operator.index(value)
    except TypeError as exc:
        raise LogError("failed to convert index to an integer") from exc
    if index < 0:
        raise LogError("failed to convert index: negative value")
    return index


class Log(Generic[C]):
    """An ordered list of entries that starts with a term-0 sentinel."""

    def __init__(self, sentinel_command: Any = None) -> None:
        self.entries: list[Entry[C]] = [Entry(command=sentinel_command, term=0)]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry[C]]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"Log({self.entries!r})"

    def at(self, idx: int) -> Entry[C]:
        """Return the entry at ``idx``."""
        index = _as_index(idx)
        if index >= len(self.entries):
            raise IndexOutOfBoundsError(index)
        return self.entries[index]

    def append_entries(
        self,
        prev_log_index: int,
        prev_log_term: int,
        entries: Iterable[Entry[C]],
    ) -> AppendOutcome:
        """Append ``entries`` after ``prev_log_index`` if the log agrees there.

        Conflicting entries from the first mismatch onwards are dropped and
        entries already present are not duplicated.
        """
        prev_index = _as_index(prev_log_index)
        if prev_index >= len(self.entries):
            return AppendOutcome.CONFLICT
        if self.at(prev_index).term != prev_log_term:
            return AppendOutcome.CONFLICT

        new_entries = list(entries)
        start = prev_index + 1
        for offset, entry in enumerate(new_entries):
            position = start + offset
            if position >= len(self.entries):
                self.entries.extend(new_entries[offset:])
                break
            if self.entries[position] != entry:
                del self.entries[position:]
                self.entries.extend(new_entries[offset:])
                break
        return AppendOutcome.SUCCESS
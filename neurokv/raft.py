"""Raft node pairing a replicated log with a state machine."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from neurokv.raft_log import Log, LogError


class RaftNodeError(Exception):
    """Raised when a node operation fails because of the log."""

    def __init__(self, log_error: LogError) -> None:
        super().__init__("log operation failed")
        self.log_error = log_error
        self.__cause__ = log_error


class StateMachine(abc.ABC):
    """Something that deterministically applies commands."""

    @abc.abstractmethod
    def apply(self, command: Any) -> Any:
        """Apply ``command`` and return its response."""


S = TypeVar("S", bound=StateMachine)


@dataclass
class RaftNode(Generic[S]):
    """A Raft participant: its log and the state machine it drives."""

    state_machine: S
    log: Log = field(default_factory=Log)
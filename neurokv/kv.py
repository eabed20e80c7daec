"""Key-value commands, responses, their JSON wire form, and the store."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from neurokv.raft import StateMachine

MAX_KEY_LEN = 256


@dataclass(frozen=True)
class GetCommand:
    """Look up the value stored under ``key``."""

    key: str


@dataclass(frozen=True)
class PutCommand:
    """Store ``value`` under ``key``."""

    key: str
    value: str


@dataclass(frozen=True)
class DelCommand:
    """Remove ``key`` and return its former value."""

    key: str


KvCommand = Union[GetCommand, PutCommand, DelCommand]


@dataclass(frozen=True)
class OkResponse:
    """The command succeeded, possibly with a value."""

    value: str | None = None


@dataclass(frozen=True)
class NotFoundResponse:
    """The key is not present."""


@dataclass(frozen=True)
class NotLeaderResponse:
    """This node is not the leader; the client should retry elsewhere."""

    leader_addr: str
    members: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InvalidKeyResponse:
    """The key is empty, too long or not ASCII."""


KvResponse = Union[OkResponse, NotFoundResponse, NotLeaderResponse, InvalidKeyResponse]


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _loads(data: str | bytes | bytearray) -> Any:
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"invalid utf-8: {exc}") from exc
    return json.loads(data)


def _require_str(fields: dict, name: str) -> str:
    if name not in fields:
        raise ValueError(f"missing field `{name}`")
    value = fields[name]
    if not isinstance(value, str):
        raise ValueError(f"field `{name}` must be a string")
    return value


def encode_command(command: KvCommand) -> str:
    """Serialize a command as ``{"<kind>": {...fields}}``."""
    if isinstance(command, GetCommand):
        return _dumps({"get": {"key": command.key}})
    if isinstance(command, PutCommand):
        return _dumps({"put": {"key": command.key, "value": command.value}})
    if isinstance(command, DelCommand):
        return _dumps({"del": {"key": command.key}})
    raise TypeError(f"not a command: {command!r}")


def decode_command(data: str | bytes | bytearray) -> KvCommand:
    """Parse a command from its JSON form; raise ValueError if malformed."""
    obj = _loads(data)
    if not isinstance(obj, dict) or len(obj) != 1:
        raise ValueError("command must be an object with exactly one variant")
    ((kind, fields),) = obj.items()
    if not isinstance(fields, dict):
        raise ValueError(f"fields of `{kind}` must be an object")
    if kind == "get":
        return GetCommand(key=_require_str(fields, "key"))
    if kind == "put":
        return PutCommand(
            key=_require_str(fields, "key"), value=_require_str(fields, "value")
        )
    if kind == "del":
        return DelCommand(key=_require_str(fields, "key"))
    raise ValueError(f"unknown variant `{kind}`")


def encode_response(response: KvResponse) -> str:
    """Serialize a response as an object tagged by ``status``."""
    if isinstance(response, OkResponse):
        obj: dict[str, Any] = {"status": "ok"}
        if response.value is not None:
            obj["value"] = response.value
        return _dumps(obj)
    if isinstance(response, NotFoundResponse):
        return _dumps({"status": "not-found"})
    if isinstance(response, NotLeaderResponse):
        return _dumps(
            {
                "status": "not-leader",
                "leader_addr": response.leader_addr,
                "members": list(response.members),
            }
        )
    if isinstance(response, InvalidKeyResponse):
        return _dumps({"status": "invalid-key"})
    raise TypeError(f"not a response: {response!r}")


def decode_response(data: str | bytes | bytearray) -> KvResponse:
    """Parse a response from its JSON form; raise ValueError if malformed."""
    obj = _loads(data)
    if not isinstance(obj, dict):
        raise ValueError("response must be an object")
    if "status" not in obj:
        raise ValueError("missing field `status`")
    status = obj["status"]
    if status == "ok":
        value = obj.get("value")
        if value is not None and not isinstance(value, str):
            raise ValueError("field `value` must be a string")
        return OkResponse(value=value)
    if status == "not-found":
        return NotFoundResponse()
    if status == "invalid-key":
        return InvalidKeyResponse()
    if status == "not-leader":
        leader_addr = _require_str(obj, "leader_addr")
        if "members" not in obj:
            raise ValueError("missing field `members`")
        members = obj["members"]
        if not isinstance(members, list) or not all(
            isinstance(member, str) for member in members
        ):
            raise ValueError("field `members` must be a list of strings")
        return NotLeaderResponse(leader_addr=leader_addr, members=members)
    raise ValueError(f"unknown status `{status}`")


def _valid_key(key: str) -> bool:
    return bool(key) and len(key) <= MAX_KEY_LEN and key.isascii()


class KvStore(StateMachine):
    """An in-memory string map driven by key-value commands."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def apply(self, command: KvCommand) -> KvResponse:
        """Apply ``command`` to the store and return the response."""
        match command:
            case GetCommand(key=key):
                if key in self._store:
                    return OkResponse(self._store[key])
                return NotFoundResponse()
            case PutCommand(key=key, value=value):
                if not _valid_key(key):
                    return InvalidKeyResponse()
                self._store[key] = value
                return OkResponse()
            case DelCommand(key=key):
                if key in self._store:
                    return OkResponse(self._store.pop(key))
                return NotFoundResponse()
        raise TypeError(f"not a command: {command!r}")
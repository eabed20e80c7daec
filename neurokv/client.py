"""Command line client for the key-value server."""

from __future__ import annotations

import argparse
import os
import socket
import struct
import sys
from typing import BinaryIO, Sequence

from neurokv.kv import (
    DelCommand,
    GetCommand,
    InvalidKeyResponse,
    KvCommand,
    NotFoundResponse,
    NotLeaderResponse,
    OkResponse,
    PutCommand,
    decode_response,
    encode_command,
)

_HEADER = struct.Struct(">I")
_MAX_FRAME = 0xFFFFFFFF
_TIMEOUT_SECONDS = 5.0


class CliError(Exception):
    """Raised when the client cannot complete a request."""


def write_message(stream: BinaryIO, msg: bytes) -> None:
    """Write ``msg`` preceded by its 4-byte big-endian length, then flush."""
    if len(msg) > _MAX_FRAME:
        raise ValueError("message too large")
    stream.write(_HEADER.pack(len(msg)))
    stream.write(msg)
    stream.flush()


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = stream.read(size - len(chunks))
        if not chunk:
            raise EOFError("unexpected end of stream")
        chunks.extend(chunk)
    return bytes(chunks)


def read_message(stream: BinaryIO) -> bytes:
    """Read one length-prefixed message; raise EOFError if it is cut short."""
    (length,) = _HEADER.unpack(_read_exact(stream, _HEADER.size))
    return _read_exact(stream, length)


def build_command(command: str, key: str, value: str | None = None) -> KvCommand:
    """Build the command named ``command`` (get, put or del) for ``key``."""
    if command == "get":
        return GetCommand(key=key)
    if command == "put":
        if value is None:
            raise CliError("value required for put command")
        return PutCommand(key=key, value=value)
    if command == "del":
        return DelCommand(key=key)
    raise ValueError(f"unknown command: {command!r}")


def handle_command(stream: BinaryIO, command: KvCommand) -> int:
    """Send ``command``, report the reply, and return the exit code."""
    try:
        write_message(stream, encode_command(command).encode("utf-8"))
        reply = read_message(stream)
    except (OSError, EOFError, ValueError) as exc:
        raise CliError(f"io error: {exc}") from exc
    try:
        response = decode_response(reply)
    except ValueError as exc:
        raise CliError(f"json error: {exc}") from exc

    if isinstance(response, OkResponse):
        print(response.value if response.value is not None else "OK")
        return 0
    if isinstance(response, NotFoundResponse):
        print("Key not found", file=sys.stderr)
        return 1
    if isinstance(response, NotLeaderResponse):
        return 1
    if isinstance(response, InvalidKeyResponse):
        print("Invalid key", file=sys.stderr)
        return 1
    raise CliError(f"unexpected response: {response!r}")


def _parse_endpoint(endpoint: str) -> tuple[str, int]:
    host, sep, port_text = endpoint.rpartition(":")
    if not sep or not host:
        raise CliError("io error: invalid socket address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError as exc:
        raise CliError("io error: invalid socket address") from exc
    if not 0 <= port <= 0xFFFF:
        raise CliError("io error: invalid socket address")
    return host, port


def _connect(endpoint: str) -> socket.socket:
    address = _parse_endpoint(endpoint)
    try:
        return socket.create_connection(address, timeout=_TIMEOUT_SECONDS)
    except OSError as exc:
        raise CliError(f"io error: {exc}") from exc


def _endpoints(values: list[str] | None) -> list[str]:
    if values is None:
        from_env = os.environ.get("ENDPOINTS")
        values = [from_env] if from_env else []
    return [part for value in values for part in value.split(",")]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neuroctl", description="Command line client for the key-value server."
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument(
        "-e",
        "--endpoints",
        action="append",
        help="comma separated host:port list (env: ENDPOINTS)",
    )
    parser.add_argument("command", choices=["get", "put", "del"])
    parser.add_argument("key")
    parser.add_argument("value", nargs="?")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command against the first endpoint; return the exit code."""
    args = _build_parser().parse_args(argv)
    endpoints = _endpoints(args.endpoints)
    try:
        if not endpoints:
            raise CliError("no endpoints provided")
        with _connect(endpoints[0]) as sock, sock.makefile("rwb") as stream:
            command = build_command(args.command, args.key, args.value)
            return handle_command(stream, command)
    except CliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
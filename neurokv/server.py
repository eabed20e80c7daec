"""TCP server that answers length-prefixed JSON key-value commands."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import struct
import sys
from typing import Any, Sequence

from neurokv.kv import KvStore, decode_command, encode_command, encode_response

logger = logging.getLogger(__name__)

_HEADER = struct.Struct(">I")
_MAX_FRAME = 0xFFFFFFFF


class ServerError(Exception):
    """Raised when a connection cannot be served."""


async def handle_conn(reader: asyncio.StreamReader, writer: Any, store: KvStore) -> None:
    """Answer framed commands from ``reader`` on ``writer`` until the peer closes.

    Each frame is a 4-byte big-endian length followed by a UTF-8 JSON command.
    A clean end of stream before a frame header ends the loop normally; any
    malformed or truncated frame raises ``ServerError``.
    """
    while True:
        try:
            header = await reader.readexactly(_HEADER.size)
        except asyncio.IncompleteReadError:
            logger.debug("client closed connection")
            return
        except OSError as exc:
            raise ServerError(f"io error: {exc}") from exc
        (length,) = _HEADER.unpack(header)

        try:
            payload = await reader.readexactly(length)
        except (asyncio.IncompleteReadError, OSError) as exc:
            raise ServerError(f"io error: {exc}") from exc

        try:
            request = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ServerError(f"utf-8 error: {exc}") from exc
        logger.info("received request: %s", request)

        try:
            command = decode_command(request)
            # Strings holding lone surrogates cannot be sent back as UTF-8.
            encode_command(command).encode("utf-8")
        except (ValueError, UnicodeEncodeError) as exc:
            raise ServerError(f"json error: {exc}") from exc

        response = store.apply(command)
        try:
            body = encode_response(response).encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ServerError(f"json error: {exc}") from exc
        if len(body) > _MAX_FRAME:
            raise ServerError("unknown error")

        try:
            writer.write(_HEADER.pack(len(body)) + body)
            await writer.drain()
        except OSError as exc:
            raise ServerError(f"io error: {exc}") from exc


async def serve(host: str, port: int) -> None:
    """Listen on ``host``:``port`` and serve every connection from one store."""
    store = KvStore()

    async def on_connect(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        logger.info("connection from %s", writer.get_extra_info("peername"))
        try:
            await handle_conn(reader, writer, store)
        except ServerError as exc:
            logger.error("error handling connection: %s", exc)
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

    try:
        server = await asyncio.start_server(on_connect, host, port)
    except OSError as exc:
        raise ServerError(f"io error: {exc}") from exc
    async with server:
        await server.serve_forever()


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from exc
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neurod", description="Key-value store server."
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--host", required=True)
    parser.add_argument("--port", required=True, type=_port)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server until interrupted; return the process exit code."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s:%(lineno)d %(message)s",
    )
    try:
        asyncio.run(serve(args.host, args.port))
    except KeyboardInterrupt:
        return 0
    except ServerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
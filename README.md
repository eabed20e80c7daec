# neurokv

A small in-memory key-value store served over TCP, a command-line client
for it, and a Raft-style replicated log.

## Installation

```
pip install .
```

## Running the server

```
neurod --host 127.0.0.1 --port 7000
```

`--host` and `--port` are both required; `--version` prints the version.
The server keeps every key in memory in a single `KvStore` shared by all
connections and serves any number of clients at once. It logs each
connection and request at INFO level. Stop it with Ctrl-C.

Each request and each response is a UTF-8 JSON document preceded by its
length as a 4-byte big-endian integer. A connection may carry any number
of requests. If a frame is truncated, is not valid UTF-8 or is not a valid
command, the server logs the error and closes that connection.

## Using the client

```
neuroctl --endpoints 127.0.0.1:7000 put greeting hello
neuroctl --endpoints 127.0.0.1:7000 get greeting
neuroctl --endpoints 127.0.0.1:7000 del greeting
```

`-e`/`--endpoints` takes a comma-separated list of `host:port` addresses
and may be given more than once. Without it, the `ENDPOINTS` environment
variable is read. The client connects to the first address, with a
5-second timeout.

- A successful `put` prints `OK`; `get` and `del` print the stored value.
- A missing key prints `Key not found` to stderr and exits with status 1.
- An invalid key prints `Invalid key` to stderr and exits with status 1.
- `put` without a value, no endpoints, a bad address or a connection or
  protocol failure print `Error: ...` to stderr and exit with status 1.

Keys given to `put` must be non-empty ASCII strings of at most 256
characters.

## Wire format

Commands:

```
{"get": {"key": "foo"}}
{"put": {"key": "foo", "value": "bar"}}
{"del": {"key": "foo"}}
```

Responses:

```
{"status": "ok", "value": "bar"}
{"status": "ok"}
{"status": "not-found"}
{"status": "invalid-key"}
{"status": "not-leader", "leader_addr": "127.0.0.1:7000", "members": ["127.0.0.1:7000"]}
```

`neurokv.kv` provides `encode_command`, `decode_command`,
`encode_response` and `decode_response` for these forms; the decoders
raise `ValueError` on malformed input.

## Using the library

```python
from neurokv.kv import KvStore, PutCommand, GetCommand, DelCommand, OkResponse

store = KvStore()
store.apply(PutCommand(key="foo", value="bar"))
assert store.apply(GetCommand(key="foo")) == OkResponse(value="bar")
assert store.apply(DelCommand(key="foo")) == OkResponse(value="bar")
```

Framing helpers for blocking streams are in `neurokv.client`:
`write_message(stream, msg)` and `read_message(stream)`. The asyncio
connection handler is `neurokv.server.handle_conn(reader, writer, store)`.

The replicated log is in `neurokv.raft_log`. A `Log` starts with a term-0
sentinel entry. `Log.at(idx)` returns an `Entry` or raises
`IndexOutOfBoundsError`. `Log.append_entries(prev_log_index,
prev_log_term, entries)` returns `AppendOutcome.CONFLICT` when the log
does not hold an entry of `prev_log_term` at `prev_log_index`. Otherwise
it drops entries from the first mismatch onwards, appends the entries not
already present, and returns `AppendOutcome.SUCCESS`.

`neurokv.raft` defines the `StateMachine` base class, which `KvStore`
implements, and `RaftNode`, which pairs a state machine with a `Log`.

## What it does not do

There is no clustering. `RaftNode` only holds a log and a state machine:
it does not elect leaders, replicate entries between nodes or apply
committed entries. The server applies every command directly to its
local store and never sends a `not-leader` response. When the client
receives one, it exits with status 1 and prints nothing. Nothing is
written to disk, so all data is lost when the server stops.

## Tests

```
pip install ".[test]"
pytest
```
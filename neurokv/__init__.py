"""In-memory key-value store with a TCP server, a client and a Raft-style log."""

__version__ = "0.1.0"
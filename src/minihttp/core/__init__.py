"""
=============================================================================
CORE MODULE
=============================================================================

Socket-level building blocks:

    reader.py         LineReader: buffered lines and exact-length reads
    connection.py     Connection: one client socket, one request
    socket_server.py  SocketServer: bind, listen, accept loop

    ┌──────────────┐   Connection   ┌──────────────┐
    │ SocketServer │ ─────────────► │  HTTPServer  │ ──► worker thread
    └──────────────┘                └──────────────┘

=============================================================================
"""

from .reader import LineReader
from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "LineReader",
    "Connection",
    "ConnectionState",
    "SocketServer",
]

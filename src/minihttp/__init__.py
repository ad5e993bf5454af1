"""
=============================================================================
MINIHTTP - Minimal HTTP/1.1 Origin Server
=============================================================================

A small HTTP/1.1 server on raw sockets. It reads one request per
connection, answers from a fixed routing table, and closes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     REQUEST/RESPONSE CYCLE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket bytes                                                       │
    │       │                                                              │
    │       ▼                                                              │
    │   LineReader      core/reader.py      lines + exact-length reads     │
    │       │                                                              │
    │       ▼                                                              │
    │   RequestParser   http/request.py     start line, headers, body      │
    │       │                                                              │
    │       ▼                                                              │
    │   Router          http/router.py      (method, target, body?) match  │
    │       │           handlers/           echo, user-agent, files, /     │
    │       ▼                                                              │
    │   HTTPResponse    http/response.py    status line + headers + body   │
    │       │                                                              │
    │       ▼                                                              │
    │   socket bytes, then close                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    $ python -m minihttp --directory /tmp
    $ curl -i http://127.0.0.1:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

Or from Python:

    from minihttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(directory="/tmp")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer

__all__ = ["HTTPServer", "ServerConfig", "__version__"]

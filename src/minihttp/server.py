"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐  Connection  ┌──────────────────┐
    │ SocketServer │ ───────────► │ _handle_connection│ ── new Thread ──┐
    └──────────────┘              └──────────────────┘                  │
                                                                        ▼
    ┌──────────────────────────────────────────────────────────────────────┐
    │ _process_connection (worker thread, one per client)                 │
    │                                                                      │
    │   RequestParser.parse(conn.reader)      bytes → HTTPRequest          │
    │   LoggingMiddleware → Router.handle     HTTPRequest → HTTPResponse   │
    │   conn.send_response(response.to_bytes())                            │
    │   conn.close()                                                       │
    └──────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR POLICY
=============================================================================

    ParseError / TransportError      ─┐
    DispatchError (handler raised)    ├──► status_page(err.status_code)
                                      │     404 for FileMissingError,
                                     ─┘     500 for everything else
    Anything unexpected              ────► 500, logged with traceback

A worker sends at most one response and always closes the connection.
Nothing a client sends can stop the accept loop.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .errors import MiniHTTPError
from .handlers import build_router
from .http import HTTPRequest, HTTPResponse, RequestParser, Router, internal_error, status_page
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO"):
    """Configure root logging once and set the minihttp logger level."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("minihttp").setLevel(level)


class HTTPServer:
    """
    One-request-per-connection HTTP/1.1 server.

        config = ServerConfig(directory="/tmp")
        server = HTTPServer(config)
        server.run()          # blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_body_size=self.config.max_body_size)
        self._router = build_router(self.config)

        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware())

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION METHODS
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware (before run())."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self):
        """Bound (host, port); useful when the config asked for port 0."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns only after shutdown() (or SIGINT/SIGTERM).

        Raises:
            OSError: If the listening socket cannot be bound, or fails
                     while accepting.
        """
        setup_logging(self.config.log_level)
        self._handler = self._middleware.wrap(self._router.handle)

        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a fresh connection to its own worker thread.

        Called from the accept loop, so it only spawns and returns.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"minihttp-{conn.id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            # Out of threads: drop this client, keep accepting
            logger.error(f"[{conn.id}] Could not start worker: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read one request, answer it, close (runs in a worker thread)."""
        with conn:
            response = self._respond(conn)
            conn.send_response(response.to_bytes())

    def _respond(self, conn: Connection) -> HTTPResponse:
        """Produce exactly one response for the connection, never raise."""
        handler = self._handler or self._middleware.wrap(self._router.handle)

        try:
            conn.state = ConnectionState.READING
            request = self._parser.parse(conn.reader, conn.address)

            conn.state = ConnectionState.PROCESSING
            return handler(request)

        except MiniHTTPError as e:
            logger.warning(
                f"[{conn.id}] {type(e).__name__}: {e} → {e.status_code}"
            )
            return status_page(e.status_code)

        except Exception as e:
            logger.exception(f"[{conn.id}] Unhandled error: {e}")
            return internal_error()

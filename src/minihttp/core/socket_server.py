"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. It knows nothing about
HTTP; each accepted client is wrapped in a Connection and handed to a
callback (HTTPServer spawns a worker thread from there).

SOCKET LIFECYCLE (Server Side):

    1. socket()    Create the TCP socket
    2. bind()      Claim host:port (127.0.0.1:4221 by default)
    3. listen()    Start queueing incoming connections
    4. accept()    Loop: one new socket per client
    5. close()     Release the listening socket on shutdown

=============================================================================
"""

import errno
import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    TCP listener with an interruptible accept loop.

        server = SocketServer(config)

        def handle_connection(conn: Connection):
            ...

        server.start(handle_connection)   # blocks until shutdown()
    """

    # accept() wakes up this often to check for shutdown
    ACCEPT_POLL_INTERVAL = 1.0

    # Pause after a failed accept() so EMFILE and friends do not spin
    ACCEPT_ERROR_BACKOFF = 0.1

    # accept() errors that mean the listening socket itself is unusable.
    # Everything else (ECONNABORTED, EMFILE, ENFILE, ENOBUFS, EINTR, ...)
    # concerns one client or is transient, and the loop keeps going.
    FATAL_ACCEPT_ERRNOS = frozenset({errno.EBADF, errno.EINVAL, errno.ENOTSOCK})

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the config when port 0 was requested.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Allow immediate restart while old sockets sit in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Install SIGINT/SIGTERM handlers for graceful shutdown.

        signal.signal() only works in the main thread, so a server started
        from a background thread (as the tests do) keeps the defaults.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each new Connection. Must not
                                block the loop for long.

        Raises:
            OSError: If binding fails (port in use, permission denied), or
                     if the listening socket breaks while accepting.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us notice shutdown() within a second
                continue
            except OSError as e:
                if not self._running:
                    break
                if e.errno in self.FATAL_ACCEPT_ERRNOS:
                    logger.error(f"Listening socket failed: {e}")
                    raise
                logger.error(f"Accept error: {e}")
                self._shutdown_event.wait(self.ACCEPT_ERROR_BACKOFF)
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                max_line_length=self.config.max_line_length,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop. Safe to call from any thread, more than once.
        """
        logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

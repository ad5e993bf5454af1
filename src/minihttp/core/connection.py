"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for its whole (short) life:

    accept() ──► Connection ──► reader.read_line()/read_exact()  (parse)
                     │
                     ├──► send_response(bytes)                     (write)
                     │
                     └──► close()                                  (FIN)

One request, one response, then close. There is no keep-alive, so the
lifecycle is a straight line:

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED

Each worker thread owns exactly one Connection; nothing else touches its
socket.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .reader import LineReader


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""

    NEW = "new"                # Just accepted
    READING = "reading"        # Parsing the request
    PROCESSING = "processing"  # Handler is running
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        reader: Buffered LineReader over the socket.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    max_line_length: int = 8192
    timeout: Optional[float] = 30.0

    reader: LineReader = field(init=False, repr=False)

    def __post_init__(self):
        # Blocking socket with an optional timeout; a silent client
        # eventually surfaces as ConnectionIOError from the reader.
        self.socket.settimeout(self.timeout)
        self.reader = LineReader(
            self.socket,
            buffer_size=self.buffer_size,
            max_line_length=self.max_line_length,
        )

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so the whole buffer goes out or we find out why not.

        Returns:
            True if send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR)   send FIN so the client sees end-of-response
        2. drain               discard unread bytes so close() does not RST
        3. close()             release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

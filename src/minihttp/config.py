"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables for the server live in one frozen dataclass. It is built
exactly once at startup (normally from the command line, see __main__.py)
and then shared read-only by the accept loop and every worker thread.

=============================================================================
CONFIGURATION GROUPS
=============================================================================

NETWORK SETTINGS
- host, port, backlog, buffer_size, timeout

PROTOCOL LIMITS
- max_line_length, max_body_size

FILES
- directory

LOGGING
- log_level

=============================================================================
WHY FROZEN?
=============================================================================

Every connection thread reads the same ServerConfig. Freezing it means
no thread can change a value another one is in the middle of using, so
the config needs no lock.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4221


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(directory="/tmp", log_level="DEBUG")

    Tests:
        ServerConfig(port=0)   # Let the OS pick a free port
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root for GET/POST /files/{name}.
    None = the /files/ routes answer 404.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = DEFAULT_HOST
    """The IP address to bind to. Localhost only by default."""

    port: int = DEFAULT_PORT
    """The port number to listen on. 0 = let the OS pick one."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """How many bytes to ask recv() for at once."""

    timeout: Optional[float] = 30.0
    """
    Per-connection socket timeout in seconds.
    None = block forever on a silent client.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_line_length: int = 8 * 1024  # 8 KiB
    """Longest start line or header line we will buffer."""

    max_body_size: int = 100 * 1024 * 1024  # 100 MiB
    """Largest Content-Length we agree to read."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead of
        on the first request.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_line_length < 64:
            raise ValueError("max_line_length must be >= 64")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"directory does not exist: {self.directory}")

"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /user-agent HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest/8.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request uploading a file."""
    body = b"hello, world"
    return (
        b"POST /files/greeting.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


def send_raw(
    port: int,
    data: bytes,
    half_close: bool = False,
    timeout: float = 5.0,
) -> bytes:
    """
    Send raw bytes to the server and read until it closes the connection.

    half_close=True shuts down our write side after sending, so the server
    sees end-of-stream (used for truncated requests).
    """
    with socket.create_connection(('127.0.0.1', port), timeout=timeout) as sock:
        sock.sendall(data)
        if half_close:
            sock.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    @property
    def directory(self) -> Optional[Path]:
        directory = self.server.config.directory
        return Path(directory) if directory else None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, **kwargs) -> bytes:
        return send_raw(self.port, data, **kwargs)


@pytest.fixture
def test_server(tmp_path: Path) -> Generator[TestServer, None, None]:
    """Server on a random port with /files/ backed by tmp_path."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(tmp_path),
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def bare_server() -> Generator[TestServer, None, None]:
    """Server without a files directory."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def server_factory(tmp_path: Path) -> Generator[Callable[..., TestServer], None, None]:
    """Build and start servers on demand, e.g. after patching socket calls."""
    started = []

    def factory(**overrides) -> TestServer:
        options = dict(
            host="127.0.0.1",
            port=0,
            directory=str(tmp_path),
            timeout=5.0,
            log_level="WARNING",
        )
        options.update(overrides)

        test_srv = TestServer(HTTPServer(ServerConfig(**options)))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield factory

    for test_srv in started:
        test_srv.stop()

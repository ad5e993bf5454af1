"""
=============================================================================
BUFFERED LINE READER
=============================================================================

TCP is a byte stream, not a message protocol. A single recv() can return
half a start line, three header lines at once, or the tail of the headers
glued to the first bytes of the body:

    Client sends:
        POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello

    Server might receive:
        recv() → "POST /files/a HT"
        recv() → "TP/1.1\r\nContent-Length: 5\r\n\r\nhel"
        recv() → "lo"

LineReader hides that. It keeps one internal buffer and offers exactly two
operations on top of it:

    read_line()     → next line, CRLF included
    read_exact(n)   → next n bytes, no more, no less

Both draw from the same buffer first and only call recv() when it runs
dry, so bytes that arrived together with the blank header line are still
there when the parser asks for the body.

=============================================================================
"""

from typing import Optional

from ..errors import ConnectionIOError, LineTooLongError, UnexpectedEOFError


CRLF = b"\r\n"


class _BytesSource:
    """recv()-compatible wrapper around an in-memory payload."""

    def __init__(self, data: bytes):
        self._data = data
        self._offset = 0

    def recv(self, bufsize: int) -> bytes:
        chunk = self._data[self._offset:self._offset + bufsize]
        self._offset += len(chunk)
        return chunk


class LineReader:
    """
    Buffered reader over anything with a socket-style ``recv(n)``.

    Attributes:
        source: The underlying byte source (normally a client socket).
        buffer_size: How much to ask recv() for at once.
        max_line_length: Longest line accepted, CRLF included.
    """

    def __init__(
        self,
        source,
        buffer_size: int = 8192,
        max_line_length: int = 8192,
    ):
        self.source = source
        self.buffer_size = buffer_size
        self.max_line_length = max_line_length
        self._buffer = bytearray()
        self._eof = False

    @classmethod
    def from_bytes(cls, data: bytes, **kwargs) -> "LineReader":
        """Build a reader over a fixed payload (handy for parsing tests)."""
        return cls(_BytesSource(data), **kwargs)

    @property
    def pending(self) -> int:
        """Number of bytes buffered but not yet consumed."""
        return len(self._buffer)

    def read_line(self) -> bytes:
        """
        Return the next CRLF-terminated line, CRLF included.

        Raises:
            UnexpectedEOFError: Stream closed before a full line arrived.
            LineTooLongError: Line is longer than max_line_length.
            ConnectionIOError: The socket failed.
        """
        scan_from = 0
        while True:
            index = self._buffer.find(CRLF, scan_from)
            if index != -1:
                end = index + len(CRLF)
                if end > self.max_line_length:
                    raise LineTooLongError(
                        f"Line exceeds {self.max_line_length} bytes"
                    )
                line = bytes(self._buffer[:end])
                del self._buffer[:end]
                return line

            if len(self._buffer) > self.max_line_length:
                raise LineTooLongError(
                    f"Line exceeds {self.max_line_length} bytes"
                )

            # A CR at the very end may be completed by the next chunk
            scan_from = max(len(self._buffer) - 1, 0)

            if not self._fill():
                raise UnexpectedEOFError(
                    f"Stream closed after {len(self._buffer)} bytes of a line"
                )

    def read_exact(self, n: int) -> bytes:
        """
        Return exactly ``n`` bytes, buffered bytes first.

        Raises:
            UnexpectedEOFError: Stream closed before n bytes were available.
            ConnectionIOError: The socket failed.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")

        while len(self._buffer) < n:
            if not self._fill(n - len(self._buffer)):
                raise UnexpectedEOFError(
                    f"Expected {n} bytes, stream closed after {len(self._buffer)}"
                )

        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    def _fill(self, wanted: Optional[int] = None) -> bool:
        """
        Pull one chunk from the source into the buffer.

        Returns:
            False once the source reports end-of-stream.
        """
        if self._eof:
            return False

        size = self.buffer_size if wanted is None else max(wanted, 1)
        size = min(size, self.buffer_size)

        try:
            chunk = self.source.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            chunk = b""
        except OSError as e:
            raise ConnectionIOError(f"recv failed: {e}") from e

        if not chunk:
            self._eof = True
            return False

        self._buffer += chunk
        return True

"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request off a LineReader and turns it into an
immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─ START LINE ─────────────────────────────────────────────────────┐
    │    POST /files/hello HTTP/1.1\r\n                                │
    │    ─┬── ─────┬───── ────┬────                                    │
    │   Method   Target    Version (sentinel, must be exactly HTTP/1.1) │
    └──────────────────────────────────────────────────────────────────┘
    ┌─ HEADER BLOCK ───────────────────────────────────────────────────┐
    │    Host: localhost:4221\r\n        ← split on FIRST ':' only     │
    │    Content-Length: 5\r\n                                         │
    │    \r\n                            ← no ':' → block ends         │
    └──────────────────────────────────────────────────────────────────┘
    ┌─ BODY (only if Content-Length) ──────────────────────────────────┐
    │    hello                           ← exactly 5 bytes, no more    │
    └──────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

START LINE
    1. Must end with " HTTP/1.1\\r\\n"                → else BadStartLineError
    2. Split what is left on the first space         → else BadStartLineError
    3. Target must start with "/"                    → else BadStartLineError
    4. Method must be GET or POST                    → else UnknownMethodError

HEADERS
    A header line is any line containing ':'. The first line without one
    (normally the blank line) ends the block. Name and value are trimmed.
    An empty name is a BadHeaderError; a field with an empty value is
    dropped. Names keep their case and duplicates are kept in order.

BODY
    Content-Length must be plain decimal digits (BadContentLengthError)
    and no larger than max_body_size (BodyTooLargeError). Without
    Content-Length there is no body at all, whatever the method.

=============================================================================
ENCODING
=============================================================================

Start line and header bytes are decoded as ISO-8859-1. Every byte maps
to exactly one code point, so encoding back with "latin-1" restores the
original bytes. /echo/ and /files/ rely on that to stay byte-exact.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple
import logging
import re

from ..core.reader import LineReader
from ..errors import (
    BadContentLengthError,
    BadHeaderError,
    BadStartLineError,
    BodyTooLargeError,
    UnknownMethodError,
)


logger = logging.getLogger(__name__)

HEADER_ENCODING = "latin-1"

DEFAULT_MAX_BODY_SIZE = 100 * 1024 * 1024  # 100 MiB


class Method(Enum):
    """The request methods this server understands."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        """
        Resolve a start-line method token.

        Raises:
            UnknownMethodError: token is not a supported method.
        """
        try:
            return cls(token)
        except ValueError:
            raise UnknownMethodError(f"Unknown method: {token!r}") from None


@dataclass(frozen=True)
class HeaderField:
    """One ``name: value`` pair, both already trimmed."""

    name: str
    value: str


class HeaderBlock:
    """
    Ordered, immutable sequence of header fields.

    Lookup is by exact (case-sensitive) name and returns the first match:

        >>> block = HeaderBlock([HeaderField("X", "1"), HeaderField("X", "2")])
        >>> block.get("X")
        '1'
        >>> block.get("x") is None
        True
    """

    def __init__(self, fields: Iterable[HeaderField] = ()):
        self._fields: Tuple[HeaderField, ...] = tuple(fields)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "HeaderBlock":
        """Build a block from ``(name, value)`` tuples."""
        return cls(HeaderField(name, value) for name, value in pairs)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value whose name equals ``name`` exactly, else default."""
        for header in self._fields:
            if header.name == name:
                return header.value
        return default

    def get_all(self, name: str) -> List[str]:
        """Every value for ``name``, in arrival order."""
        return [h.value for h in self._fields if h.name == name]

    def __contains__(self, name: object) -> bool:
        return any(h.name == name for h in self._fields)

    def __iter__(self) -> Iterator[HeaderField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderBlock):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{h.name}: {h.value}" for h in self._fields)
        return f"HeaderBlock([{pairs}])"


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Immutable once built: handlers read it, nothing writes it.

    Attributes:
        method:         Method.GET or Method.POST
        target:         Request target exactly as sent ("/echo/abc")
        headers:        HeaderBlock in arrival order
        body:           None when no Content-Length was sent, otherwise
                        exactly Content-Length bytes (possibly b"")
        client_address: (ip, port) of the peer, for logging
    """

    method: Method
    target: str
    headers: HeaderBlock = field(default_factory=HeaderBlock)
    body: Optional[bytes] = None
    client_address: Tuple[str, int] = ("", 0)

    @property
    def has_body(self) -> bool:
        """True iff the request declared a Content-Length."""
        return self.body is not None

    @property
    def user_agent(self) -> Optional[str]:
        """First User-Agent value, or None."""
        return self.headers.get("User-Agent")

    @property
    def content_length(self) -> Optional[int]:
        """Length of the body that was read, or None without a body."""
        return None if self.body is None else len(self.body)


class RequestParser:
    """
    Parses one request from a LineReader.

    Usage:
        parser = RequestParser(max_body_size=config.max_body_size)
        request = parser.parse(conn.reader, conn.address)
    """

    VERSION_SENTINEL = b" HTTP/1.1\r\n"

    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")

    def __init__(self, max_body_size: int = DEFAULT_MAX_BODY_SIZE):
        """
        Args:
            max_body_size: Largest Content-Length accepted. Anything bigger
                           is refused before a single body byte is read.
        """
        self.max_body_size = max_body_size

    def parse(
        self,
        reader: LineReader,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse exactly one request.

        On success the reader has consumed the start line, the header
        block (including the line that ended it) and, when present, exactly
        Content-Length body bytes.

        Raises:
            ParseError subclasses for malformed input, TransportError
            subclasses when the stream fails or ends early.
        """
        method, target = self._parse_start_line(reader.read_line())
        headers = self._parse_headers(reader)
        body = self._read_body(reader, headers)

        logger.debug(
            f"Parsed {method.value} {target} "
            f"({len(headers)} headers, body={'none' if body is None else len(body)})"
        )

        return HTTPRequest(
            method=method,
            target=target,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_start_line(self, line: bytes) -> Tuple[Method, str]:
        if not line.endswith(self.VERSION_SENTINEL):
            raise BadStartLineError(
                f"Start line does not end with HTTP/1.1: {line!r}"
            )

        prefix = line[:-len(self.VERSION_SENTINEL)].decode(HEADER_ENCODING)
        parts = prefix.split(" ", 1)
        if len(parts) != 2:
            raise BadStartLineError(f"Start line missing method or target: {line!r}")

        token, target = parts
        if not target.startswith("/"):
            raise BadStartLineError(f"Request target must start with '/': {target!r}")

        return Method.from_token(token), target

    def _parse_headers(self, reader: LineReader) -> HeaderBlock:
        fields = []
        while True:
            line = reader.read_line().decode(HEADER_ENCODING)
            if ":" not in line:
                break

            name, value = line.split(":", 1)
            name = name.strip()
            value = value.strip()

            if not name:
                raise BadHeaderError(f"Header with empty name: {line!r}")
            if not value:
                logger.debug(f"Dropping header with empty value: {name}")
                continue

            fields.append(HeaderField(name, value))

        return HeaderBlock(fields)

    def _read_body(self, reader: LineReader, headers: HeaderBlock) -> Optional[bytes]:
        raw_length = headers.get("Content-Length")
        if raw_length is None:
            return None

        if not self.CONTENT_LENGTH_PATTERN.fullmatch(raw_length):
            raise BadContentLengthError(f"Invalid Content-Length: {raw_length!r}")

        length = int(raw_length)
        if length > self.max_body_size:
            raise BodyTooLargeError(
                f"Content-Length {length} exceeds limit of {self.max_body_size}"
            )

        return reader.read_exact(length)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_body_size: int = DEFAULT_MAX_BODY_SIZE,
) -> HTTPRequest:
    """
    Parse a request held entirely in memory.

    Args:
        data: Raw request bytes.
        client_address: Client's (ip, port) tuple.
        max_body_size: Maximum allowed Content-Length.

    Returns:
        Parsed HTTPRequest object.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(LineReader.from_bytes(data), client_address)

"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

LONG FORM (default):

    HTTP/1.1 200 OK\r\n                         ← Status line
    Content-Type: text/plain\r\n                ← Headers, insertion order
    Content-Length: 3\r\n                       ← Auto-calculated
    \r\n                                        ← Empty line (separator)
    abc                                         ← Body bytes

SHORT FORM (declare_length=False):

    HTTP/1.1 404 Not Found\r\n
    \r\n
    404 Not Found                               ← Ends at connection close

Every connection closes after a single response, so a body without
Content-Length is still unambiguous. The short form is used for the fixed
"200 OK", "404 Not Found" and "500 Internal Server Error" pages.

Nothing else is added automatically: no Date, no Server header. What a
handler builds is exactly what goes on the wire.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus, reason_phrase


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Use ResponseBuilder, or one of the helpers at the bottom of this
    module, rather than filling the fields by hand.

    Attributes:
        status:         Status code, 100-599
        headers:        Header name → value, serialized in insertion order
        body:           Raw body bytes
        reason:         Reason phrase; derived from status when None
        declare_length: Emit Content-Length (long form) or not (short form)
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    reason: Optional[str] = None
    declare_length: bool = True
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if not 100 <= int(self.status) <= 599:
            raise ValueError(f"Status code out of range: {self.status}")

    @property
    def reason_phrase(self) -> str:
        """The reason phrase that goes after the status code."""
        return self.reason if self.reason is not None else reason_phrase(self.status)

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.reason_phrase}"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Returns:
            Status line, headers, blank line and body as one buffer.
        """
        response_headers = dict(self.headers)

        if self.declare_length and "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        # latin-1 keeps header values that came from request bytes byte-exact
        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"

        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("abc")
            .build())

    Each method returns ``self`` except build().
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._reason: Optional[str] = None
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._declare_length = True

    def status(self, status: int, reason: Optional[str] = None) -> "ResponseBuilder":
        """Set the status code (and optionally a custom reason phrase)."""
        self._status = status
        self._reason = reason
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the raw body.

        Strings are encoded as latin-1 so text taken from the request line
        or headers goes back out byte for byte.
        """
        if isinstance(body, str):
            self._body = body.encode("latin-1")
        else:
            self._body = body
        return self

    def text(self, text: Union[str, bytes], content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """Plain text body with Content-Type: text/plain."""
        return self.body(text).content_type(content_type)

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        """Binary body with Content-Type: application/octet-stream."""
        return self.body(data).content_type(OCTET_STREAM)

    def without_length(self) -> "ResponseBuilder":
        """Use the short form: no Content-Length, body ends at close."""
        self._declare_length = False
        return self

    def build(self) -> HTTPResponse:
        """Build the final HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
            reason=self._reason,
            declare_length=self._declare_length,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok_text(text: Union[str, bytes]) -> HTTPResponse:
    """200 OK, text/plain."""
    return ResponseBuilder().text(text).build()


def ok_bytes(data: bytes) -> HTTPResponse:
    """200 OK, application/octet-stream."""
    return ResponseBuilder().octet_stream(data).build()


def created() -> HTTPResponse:
    """201 Created with an empty text body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).text(b"").build()


def status_page(status: int) -> HTTPResponse:
    """
    Short-form page whose body repeats the status line.

        HTTP/1.1 404 Not Found\\r\\n\\r\\n404 Not Found
    """
    phrase = reason_phrase(status)
    return (ResponseBuilder()
        .status(status)
        .body(f"{int(status)} {phrase}")
        .without_length()
        .build())


def index_ok() -> HTTPResponse:
    """The bare ``200 OK`` page served at ``/``."""
    return status_page(HTTPStatus.OK)


def not_found() -> HTTPResponse:
    """404 Not Found (short form)."""
    return status_page(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """500 Internal Server Error (short form)."""
    return status_page(HTTPStatus.INTERNAL_SERVER_ERROR)

"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the server can hit while serving a connection is one of the
exceptions below. Each carries the HTTP status code the connection worker
should answer with, the same way a parse error carries its status:

    MiniHTTPError                     500
    ├── ParseError                    (request bytes are not what we accept)
    │   ├── BadStartLineError
    │   ├── UnknownMethodError
    │   ├── BadHeaderError
    │   ├── BadContentLengthError
    │   └── BodyTooLargeError
    ├── TransportError                (the byte stream itself failed)
    │   ├── UnexpectedEOFError
    │   ├── LineTooLongError
    │   └── ConnectionIOError
    └── DispatchError                 (a handler could not do its job)
        ├── FileMissingError          404
        ├── FileReadError
        ├── FileWriteError
        └── MissingHeaderError

=============================================================================
WHO HANDLES WHAT
=============================================================================

    Parser / reader ──raise──► worker ──► status_page(err.status_code)
    Handlers        ──raise──► worker ──► status_page(err.status_code)

    FileMissingError is normally caught inside the download handler and
    turned into a plain 404 response, so the worker never sees it.

=============================================================================
"""

from typing import Optional


class MiniHTTPError(Exception):
    """
    Base class for all server errors.

    Attributes:
        status_code: HTTP status to send back when this error reaches the
                     connection worker.
    """

    status_code = 500

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


# =============================================================================
# PARSE-TIME
# =============================================================================

class ParseError(MiniHTTPError):
    """The request bytes do not form a request we accept."""


class BadStartLineError(ParseError):
    """Start line is not ``METHOD SP target SP HTTP/1.1 CRLF``."""


class UnknownMethodError(ParseError):
    """Start line names a method we do not implement."""


class BadHeaderError(ParseError):
    """Header line has an empty field name."""


class BadContentLengthError(ParseError):
    """Content-Length is present but not an unsigned decimal integer."""


class BodyTooLargeError(ParseError):
    """Content-Length exceeds the configured maximum body size."""


# =============================================================================
# TRANSPORT-TIME
# =============================================================================

class TransportError(MiniHTTPError):
    """Reading from the client failed."""


class UnexpectedEOFError(TransportError):
    """The peer closed the stream before a full line or body arrived."""


class LineTooLongError(TransportError):
    """A line exceeded the reader's maximum length."""


class ConnectionIOError(TransportError):
    """Socket-level failure (timeout, reset mid-read, ...)."""


# =============================================================================
# DISPATCH-TIME
# =============================================================================

class DispatchError(MiniHTTPError):
    """A route handler failed."""


class FileMissingError(DispatchError):
    """Requested file could not be stat'ed."""

    status_code = 404


class FileReadError(DispatchError):
    """File exists but reading it failed."""


class FileWriteError(DispatchError):
    """Uploaded body could not be written to disk."""


class MissingHeaderError(DispatchError):
    """A route requires a header that the request did not carry."""

    def __init__(self, header: str):
        super().__init__(f"Missing required header: {header}")
        self.header = header

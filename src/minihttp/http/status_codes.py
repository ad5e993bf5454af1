"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can emit, plus their reason phrases.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase  (HTTPStatus.NOT_FOUND.phrase)
              └───────── Status code    (int(HTTPStatus.NOT_FOUND))

Only the codes the router and worker actually produce are listed. Any
other integer in 100-599 can still be sent; its phrase is "Unknown".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.OK.phrase
        'OK'
    """

    # 2xx SUCCESS
    OK = 200                      # GET /, /echo/, /user-agent, /files/
    CREATED = 201                 # POST /files/

    # 4xx CLIENT ERROR
    NOT_FOUND = 404               # Unknown route or missing file

    # 5xx SERVER ERROR
    INTERNAL_SERVER_ERROR = 500   # Any parse, transport or dispatch failure

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Reason phrase for any status code.

    Args:
        code: Integer status code (100-599).

    Returns:
        The known phrase, or "Unknown".
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"

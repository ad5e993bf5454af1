"""
=============================================================================
HTTP MODULE
=============================================================================

Protocol-level pieces, independent of sockets:

    request.py       RequestParser, HTTPRequest, HeaderBlock, Method
    response.py      HTTPResponse, ResponseBuilder, helper constructors
    status_codes.py  HTTPStatus with reason phrases
    router.py        Router, Route, RouteType

=============================================================================
"""

from .request import (
    HTTPRequest,
    HeaderBlock,
    HeaderField,
    Method,
    RequestParser,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    created,
    index_ok,
    internal_error,
    not_found,
    ok_bytes,
    ok_text,
    status_page,
)
from .router import Route, RouteMatch, Router, RouteType
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "HTTPRequest",
    "HeaderBlock",
    "HeaderField",
    "Method",
    "RequestParser",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "created",
    "index_ok",
    "internal_error",
    "not_found",
    "ok_bytes",
    "ok_text",
    "status_page",
    # Status
    "HTTPStatus",
    # Routing
    "Route",
    "RouteMatch",
    "Router",
    "RouteType",
]

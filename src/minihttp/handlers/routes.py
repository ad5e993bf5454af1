"""
The fixed routing table.

    GET   /echo/{rest}    200 text/plain, body = {rest}
    POST  /files/{name}   201 Created            (needs a body)
    GET   /files/{name}   200 application/octet-stream
    GET   /user-agent     200 text/plain, body = User-Agent
    GET   /               200 OK
    *     *               404 Not Found
"""

import logging

from ..config import ServerConfig
from ..errors import MissingHeaderError
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, index_ok, ok_text
from ..http.router import Router, RouteType
from .files import FileHandler


logger = logging.getLogger(__name__)


def echo(request: HTTPRequest, rest: str) -> HTTPResponse:
    """Reflect the rest of the target verbatim."""
    return ok_text(rest)


def user_agent(request: HTTPRequest, tail: str) -> HTTPResponse:
    """Reflect the first User-Agent header."""
    agent = request.user_agent
    if agent is None:
        raise MissingHeaderError("User-Agent")
    return ok_text(agent)


def index(request: HTTPRequest, tail: str) -> HTTPResponse:
    return index_ok()


def build_router(config: ServerConfig) -> Router:
    """
    Register every route, most specific first.

    Args:
        config: Read for the files directory only.

    Returns:
        A Router ready for HTTPServer.
    """
    files = FileHandler(config.directory)
    router = Router()

    router.get("/echo/", kind=RouteType.PREFIX)(echo)
    router.post("/files/", kind=RouteType.PREFIX, requires_body=True)(files.upload)
    router.get("/files/", kind=RouteType.PREFIX)(files.download)
    router.get("/user-agent")(user_agent)
    router.get("/")(index)

    logger.debug(f"Files directory: {config.directory or '(none, /files/ answers 404)'}")
    return router


def dispatch(request: HTTPRequest, config: ServerConfig) -> HTTPResponse:
    """One-shot dispatch without keeping a router around."""
    return build_router(config).handle(request)

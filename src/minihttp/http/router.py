"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, target, body present?) onto a handler. Routes are tried in
registration order and the first match wins:

    router = Router()

    @router.get("/echo/", kind=RouteType.PREFIX)
    def echo(request, tail):
        return ok_text(tail)

    @router.get("/")
    def index(request, tail):
        return index_ok()

    router.handle(request)   # → HTTPResponse (404 when nothing matches)

=============================================================================
MATCHING
=============================================================================

    EXACT   "/user-agent"  matches "/user-agent" only        tail = ""
    PREFIX  "/files/"      matches "/files/a.txt"            tail = "a.txt"
                           matches "/files/"                 tail = ""
                           does NOT match "/files"

Targets are compared verbatim: no URL-decoding, no trailing-slash
normalization, no query-string splitting. A route can also demand a body
(requires_body=True); a request without Content-Length skips it.

Handlers receive the request and the tail left over after the route's
path:

    Handler = Callable[[HTTPRequest, str], HTTPResponse]

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
import logging

from .request import HTTPRequest, Method
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest, str], HTTPResponse]


class RouteType(Enum):
    """How a route's path is compared against the request target."""

    EXACT = "exact"     # /user-agent - whole target must match
    PREFIX = "prefix"   # /echo/      - target must start with it


@dataclass
class Route:
    """
    A registered route.

        Route(
            method=Method.POST,
            path="/files/",
            handler=files.upload,
            kind=RouteType.PREFIX,
            requires_body=True,
        )
    """

    method: Method
    path: str
    handler: Handler
    kind: RouteType = RouteType.EXACT
    requires_body: bool = False

    def match(self, method: Method, target: str, has_body: bool) -> Optional[str]:
        """
        Test this route against a request.

        Returns:
            The tail after the route path on a match, else None.
        """
        if method is not self.method:
            return None
        if self.requires_body and not has_body:
            return None

        if self.kind is RouteType.EXACT:
            return "" if target == self.path else None

        if target.startswith(self.path):
            return target[len(self.path):]
        return None


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

    Example:
        Route:   GET /echo/ (prefix)
        Target:  /echo/abc
        Result:  RouteMatch(route=<Route>, tail="abc")
    """

    route: Route
    tail: str


class Router:
    """Ordered routing table. First registered, first matched."""

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: Method,
        path: str,
        handler: Handler,
        kind: RouteType = RouteType.EXACT,
        requires_body: bool = False,
    ) -> Route:
        """
        Register a route at the end of the table.

        Args:
            method: Method the route answers to.
            path: Literal path, or prefix when kind is PREFIX.
            handler: Called as handler(request, tail).
            kind: EXACT or PREFIX comparison.
            requires_body: Only match requests that carried a body.

        Returns:
            The registered Route.
        """
        route = Route(
            method=method,
            path=path,
            handler=handler,
            kind=kind,
            requires_body=requires_body,
        )
        self._routes.append(route)
        return route

    def route(
        self,
        method: Method,
        path: str,
        kind: RouteType = RouteType.EXACT,
        requires_body: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, path, handler, kind=kind, requires_body=requires_body)
            return handler
        return decorator

    def get(self, path: str, **kwargs) -> Callable[[Handler], Handler]:
        return self.route(Method.GET, path, **kwargs)

    def post(self, path: str, **kwargs) -> Callable[[Handler], Handler]:
        return self.route(Method.POST, path, **kwargs)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def match(self, method: Method, target: str, has_body: bool = False) -> Optional[RouteMatch]:
        """
        Find the first route matching the request.

        Returns:
            RouteMatch if found, None otherwise.
        """
        for route in self._routes:
            tail = route.match(method, target, has_body)
            if tail is not None:
                return RouteMatch(route=route, tail=tail)
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Handler exceptions propagate to the caller; the connection worker
        decides what status they map to.

        Returns:
            The handler's response, or 404 Not Found when nothing matches.
        """
        match = self.match(request.method, request.target, request.has_body)
        if match is None:
            logger.debug(f"No route for {request.method.value} {request.target}")
            return not_found()

        return match.route.handler(request, match.tail)

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order."""
        return list(self._routes)

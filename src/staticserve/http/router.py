"""
=============================================================================
ROUTER
=============================================================================

Matches request paths to handlers and strips mount prefixes.

    Pattern                  Path                       path_params
    ───────────────────────  ─────────────────────────  ────────────────────
    /health                  /health                    {}
    /files/:name             /files/a.txt               {"name": "a.txt"}
    /static/*path            /static/css/site.css       {"path": "css/site.css"}
    /static/*path            /static                    {"path": ""}

Paths are matched exactly as received. The router does not collapse
"//", strip trailing slashes, or percent-decode: whatever follows a
wildcard mount is handed to the handler verbatim, and deciding whether it
is safe is the file resolver's job.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, error_response
from .status_codes import HTTPStatus


Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A registered route. `methods` empty means any method."""

    path: str
    handler: Handler
    methods: FrozenSet[str] = frozenset()
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)

    def allows(self, method: str) -> bool:
        return not self.methods or method.upper() in self.methods


@dataclass
class RouteMatch:
    route: Route
    params: Dict[str, str]


def compile_pattern(path: str) -> re.Pattern:
    """
    Compile a route pattern into a regex.

        /users/:id      → ^/users/(?P<id>[^/]+)$
        /static/*path   → ^/static(?:/(?P<path>.*))?$

    A wildcard must be the last segment; it also matches the bare prefix.
    """
    segments = [segment for segment in path.split("/") if segment]
    regex_parts = ["^"]

    for index, segment in enumerate(segments):
        if segment.startswith("*"):
            if index != len(segments) - 1:
                raise ValueError(f"Wildcard must be the last segment: {path}")
            name = segment[1:] or "wildcard"
            regex_parts.append(f"(?:/(?P<{name}>.*))?")
            break

        regex_parts.append("/")
        if segment.startswith(":"):
            regex_parts.append(f"(?P<{segment[1:]}>[^/]+)")
        else:
            regex_parts.append(re.escape(segment))

    if len(regex_parts) == 1:
        regex_parts.append("/")

    regex_parts.append("$")
    return re.compile("".join(regex_parts))


class Router:
    """
    First-registered, first-matched router.

    Usage:
        router = Router()
        router.add_route("/static/*path", static_handler, methods=["GET", "HEAD"])

        @router.get("/health")
        def health(request):
            ...
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(
        self,
        path: str,
        handler: Handler,
        methods: Optional[Iterable[str]] = None,
    ) -> Route:
        route = Route(
            path=path,
            handler=handler,
            methods=frozenset(m.upper() for m in (methods or ())),
            _pattern=compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def route(self, path: str, methods: Optional[Iterable[str]] = None):
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, methods)
            return handler
        return decorator

    def get(self, path: str):
        """Register a GET route (HEAD is answered by the same handler)."""
        return self.route(path, ["GET", "HEAD"])

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        for route in self._routes:
            if not route.allows(method):
                continue
            found = route._pattern.match(path)
            if found:
                params = {k: (v or "") for k, v in found.groupdict().items()}
                return RouteMatch(route=route, params=params)
        return None

    def allowed_methods(self, path: str) -> List[str]:
        """Methods that would match `path`, for the Allow header of a 405."""
        methods = set()
        for route in self._routes:
            if route._pattern.match(path):
                methods.update(route.methods)
        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch to the matching handler, or answer 405 / 404."""
        match = self.match(request.method, request.path)
        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.allowed_methods(request.path)
        if allowed:
            response = error_response(HTTPStatus.METHOD_NOT_ALLOWED)
            response.headers["Allow"] = ", ".join(allowed)
            return response

        return error_response(HTTPStatus.NOT_FOUND)

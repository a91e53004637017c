"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router like layers of an onion:

    request ──► Logging ──► ... ──► router ──► StaticFileHandler
    response ◄── Logging ◄── ... ◄──────────────────┘

Each middleware receives the request and `next`, the rest of the chain,
and returns a response. The response may still be streaming (its body is
a FileWindow that has not been read yet), so middleware must not consume
`response.stream`; headers and status are fair game.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class AddHeader(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Served-By", "staticserve")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request, usually by calling next(request)."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware; the first one added is the outermost.

        pipeline = MiddlewarePipeline().use(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Build MW1(MW2(...(handler))) from the registered middleware."""
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)

"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Glue between the router and the file pipeline.

    GET /static/css/site.css
          │
          │  router: path_params = {"path": "css/site.css"}   (still encoded)
          ▼
    ┌──────────────┐   ResolvedFile   ┌──────────────┐  ResponseDescriptor
    │   resolve()  │ ───────────────► │   build()    │ ─────────────────┐
    └──────────────┘                  └──────────────┘                  │
          │ Rejected                                                    ▼
          ▼                                                     ┌──────────────┐
    describe_rejection() ── 400 / 404 / 500 ──────────────────► │  FileWindow  │
                                                                └──────────────┘
                                                                  HTTPResponse
                                                                  (streamed)

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /static/../../../etc/passwd HTTP/1.1

The resolver rejects ".." before touching the disk and, after following
symlinks, checks that the canonical target is still inside the serving
root. A rejected path gets the same bodiless 404 as a missing file, so a
client cannot probe which paths exist outside the root. Rejections are
logged here, not in the resolver: a forbidden path is worth a WARNING
because it usually means somebody is trying.

=============================================================================
"""

import logging
from typing import Mapping, Optional

from ..config import StaticConfig
from ..files.builder import ResponseDescriptor, build, describe_rejection
from ..files.resolver import Rejected, RejectionKind, resolve
from ..files.stream import FileWindow
from ..http.mime_types import MimeTypes
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


SERVED_METHODS = ("GET", "HEAD")


class StaticFileHandler:
    """
    Serves files below one directory.

    Usage:
        static = StaticFileHandler(StaticConfig(root="/var/www", url_prefix="/static"))
        router.add_route("/static/*path", static, methods=StaticFileHandler.methods)

    The serving root is canonicalized in the constructor, so a missing or
    non-directory root fails at startup with ConfigurationError.
    """

    methods = SERVED_METHODS

    def __init__(self, config: StaticConfig):
        config.validate()
        self.config = config
        self.root = config.serve_root()
        self.mime_types = MimeTypes(
            overrides=config.mime_overrides,
            default=config.default_mime_type,
        )
        self.url_prefix = config.url_prefix.rstrip("/")

    @property
    def route_pattern(self) -> str:
        """Router pattern for the mount, e.g. "/static/*path"."""
        return f"{self.url_prefix}/*path"

    def handle(
        self,
        request_path: str,
        request_headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseDescriptor:
        """
        Map a request path (relative to the mount, percent-encoded) and its
        headers to a response description. Opens no files.
        """
        resolution = resolve(
            self.root,
            request_path,
            index_file=self.config.index_file,
            serve_hidden=self.config.serve_hidden_files,
        )

        if isinstance(resolution, Rejected):
            self._log_rejection(request_path, resolution)
            return describe_rejection(resolution)

        return build(resolution, request_headers, self.mime_types)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        """
        Router entry point: HTTPRequest in, streaming HTTPResponse out.

        Expects the `*path` wildcard in `request.path_params`; the router has
        already turned away methods outside `methods` with a 405.
        """
        descriptor = self.handle(request.path_params["path"], request.headers)
        response = HTTPResponse(status=descriptor.status, headers=dict(descriptor.headers))

        if request.is_head or not descriptor.has_body:
            return response

        window = FileWindow(
            descriptor.path,
            descriptor.window.start,
            descriptor.window.end,
            chunk_size=self.config.chunk_size,
        )
        # Open before any header is written, so a failure can still be a 500.
        try:
            window.open()
        except OSError as e:
            logger.error(f"Cannot open {descriptor.path}: {e}")
            return HTTPResponse(
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
                headers={"Content-Length": "0"},
            )

        response.stream = window
        return response

    def _log_rejection(self, request_path: str, rejected: Rejected) -> None:
        if rejected.kind is RejectionKind.FORBIDDEN:
            logger.warning(f"Forbidden path {request_path!r}: {rejected.reason}")
        elif rejected.kind is RejectionKind.IO_ERROR:
            logger.error(f"I/O error for {request_path!r}: {rejected.reason}")
        else:
            logger.debug(f"{rejected.kind.value} {request_path!r}: {rejected.reason}")

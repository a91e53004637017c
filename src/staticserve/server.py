"""
=============================================================================
HTTP SERVER
=============================================================================

Puts the pieces together:

    SocketServer ── accept ──► ThreadPoolExecutor ── worker ──┐
                                                              ▼
        Connection.read_request() → RequestParser.parse() → middleware
            → Router → StaticFileHandler → HTTPResponse
        Connection.send_stream(head, response.iter_body())
        response.close()                                 (always)
        keep-alive? ── yes ──► read the next request on the same socket

=============================================================================
ERRORS THE SERVER ANSWERS ITSELF
=============================================================================

    400 / 405 / 505   request parser (HTTPParseError.status_code)
    408               first request did not arrive within `timeout`
    413               request larger than `max_request_size`
    500               handler raised
    503               every worker busy and the wait queue full

If a file fails in the middle of its body the status line is long gone,
so the only honest thing left is to drop the connection: the client sees
fewer bytes than Content-Length promised and knows the transfer failed.

=============================================================================
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from .config import ServerConfig, StaticConfig
from .core import Connection, RequestTooLarge, SocketServer
from .handlers import StaticFileHandler
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    Router,
    error_response,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Threaded HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(port=8080))
        server.mount_static(StaticConfig(root="./public", url_prefix="/static"))
        server.use(LoggingMiddleware())
        server.run()  # blocks until Ctrl+C / SIGTERM / stop()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = Router()
        self._middleware = MiddlewarePipeline()

        self._executor: Optional[ThreadPoolExecutor] = None
        # Running plus queued connections; beyond this new clients get a 503.
        self._slots = threading.BoundedSemaphore(self.config.max_workers * 2)

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False

    # ─────────────────────────────────────────────────────────────────────
    # CONFIGURATION
    # ─────────────────────────────────────────────────────────────────────

    def use(self, middleware: Middleware) -> "HTTPServer":
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    def mount_static(self, static_config: StaticConfig) -> StaticFileHandler:
        """
        Serve `static_config.root` under `static_config.url_prefix`.

        Raises:
            ConfigurationError: If the root is unusable.
        """
        handler = StaticFileHandler(static_config)
        self._router.add_route(handler.route_pattern, handler, methods=handler.methods)
        logger.info(f"Serving {handler.root} at {handler.route_pattern}")
        return handler

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    def run(self):
        """Start the server. Blocks until stop() or a shutdown signal."""
        self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="staticserve-worker",
        )
        self._running = True

        logger.info(
            f"{self.config.server_name} starting on {self.config.host}:{self.config.port} "
            f"with {self.config.max_workers} workers"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("staticserve").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        logger.info("Server stopped")

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST HANDLING
    # ─────────────────────────────────────────────────────────────────────

    def _handle_connection(self, conn: Connection):
        """Hand a new connection to the pool, or turn it away with a 503."""
        if not self._slots.acquire(blocking=False):
            logger.warning(f"[{conn.id}] All workers busy, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()
            return

        try:
            self._executor.submit(self._process_connection, conn)
        except RuntimeError:
            # Executor already shut down.
            self._slots.release()
            conn.close()

    def _process_connection(self, conn: Connection):
        """The keep-alive loop for one connection (runs in a worker)."""
        try:
            with conn:
                while self._running:
                    if not self._serve_one(conn):
                        break
                    conn.set_keep_alive()
        finally:
            self._slots.release()

    def _serve_one(self, conn: Connection) -> bool:
        """Read, handle and answer one request. Returns keep-alive."""
        try:
            raw_request = conn.read_request()
        except TimeoutError:
            self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
            return False
        except RequestTooLarge as e:
            self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
            return False

        if raw_request is None:
            return False

        try:
            request = self._parser.parse(raw_request, conn.address)
        except HTTPParseError as e:
            self._send_error(conn, HTTPStatus(e.status_code), str(e))
            return False

        try:
            response = self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            response = error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

        keep_alive = request.is_keep_alive and self.config.keep_alive
        if keep_alive:
            response.headers.setdefault("Connection", "keep-alive")
            response.headers.setdefault(
                "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
            )
        else:
            response.headers["Connection"] = "close"

        return self._write_response(conn, request, response) and keep_alive

    def _write_response(
        self,
        conn: Connection,
        request: HTTPRequest,
        response: HTTPResponse,
    ) -> bool:
        """Send head and body; always releases the response's file handle."""
        try:
            head = response.head_bytes(self.config.server_name)
            if request.is_head or not response.status.allows_body:
                return conn.send_response(head)
            return conn.send_stream(head, response.iter_body())
        except OSError as e:
            logger.error(f"[{conn.id}] Aborting {request.method} {request.path}: {e}")
            return False
        finally:
            response.close()

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        response = error_response(status, message)
        response.headers["Connection"] = "close"
        conn.send_response(response.to_bytes(self.config.server_name))


def create_app(
    config: Optional[ServerConfig] = None,
    static_config: Optional[StaticConfig] = None,
) -> HTTPServer:
    """
    Build a server with a static mount and the access log.

        app = create_app(ServerConfig(port=3000), StaticConfig(root="./public"))
        app.run()
    """
    config = config or ServerConfig()
    server = HTTPServer(config)
    server.use(LoggingMiddleware(log_format=config.log_format))
    server.mount_static(static_config or StaticConfig())
    return server

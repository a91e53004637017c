"""
=============================================================================
STATICSERVE
=============================================================================

A static file server on a from-scratch HTTP/1.1 stack.

    ┌──────────────────────────────────────────────────────────────────┐
    │  core/         sockets, connections, streamed writes             │
    │  http/         parsing, status codes, MIME types, routing        │
    │  middleware/   access log                                        │
    │  handlers/     StaticFileHandler (router glue)                   │
    │  files/        resolve → build → stream   (no I/O beyond files)  │
    └──────────────────────────────────────────────────────────────────┘

What a file request gets:

    - path resolution confined to one directory, symlinks included
    - MIME type from the extension, with per-deployment overrides
    - ETag / Last-Modified, and If-Match, If-None-Match,
      If-Modified-Since, If-Unmodified-Since, If-Range
    - single byte ranges (206 / 416)
    - bodies streamed in bounded chunks

Quick start:

    from staticserve import create_app, ServerConfig, StaticConfig

    create_app(ServerConfig(port=8080), StaticConfig(root="./public")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, StaticConfig
from .files import ConfigurationError
from .handlers import StaticFileHandler
from .server import HTTPServer, create_app

__all__ = [
    "ConfigurationError",
    "HTTPServer",
    "ServerConfig",
    "StaticConfig",
    "StaticFileHandler",
    "create_app",
    "__version__",
]

"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Two dataclasses: ServerConfig for the network side, StaticConfig for the
directory being served.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m staticserve ./public --port 3000                 │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 STATIC_ROOT=./public python -m staticserve  │
    │                                                                     │
    │   3. Default values (in these dataclasses)                          │
    └─────────────────────────────────────────────────────────────────────┘

Both classes validate eagerly with validate(). A bad serving root is a
startup failure (ConfigurationError), never a per-request one.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from .files.resolver import ConfigurationError, ServeRoot
from .files.stream import DEFAULT_CHUNK_SIZE
from .http.mime_types import DEFAULT_MIME_TYPE, normalize_extension
from .http.response import DEFAULT_SERVER_NAME


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


def parse_mime_overrides(value: str) -> Dict[str, str]:
    """
    Parse ".ext=type,.ext2=type2" into {".ext": "type", ".ext2": "type2"}.

    Raises:
        ConfigurationError: On an entry without "=" or with an empty side.
    """
    overrides: Dict[str, str] = {}
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        extension, sep, mime_type = entry.partition("=")
        extension = extension.strip().lstrip(".")
        mime_type = mime_type.strip()
        if not sep or not extension or not mime_type:
            raise ConfigurationError(f"Invalid MIME override: {entry!r}")
        overrides[normalize_extension(extension)] = mime_type
    return overrides


def parse_flag(value: str) -> bool:
    """
    Parse an on/off environment value ("1", "true", "yes", "on" and their
    opposites, any case).

    Raises:
        ConfigurationError: On anything else.
    """
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"Invalid boolean: {value!r}")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - keep_alive, keep_alive_timeout, max_request_size

    WORKERS
    - max_workers: size of the ThreadPoolExecutor handling connections

    LOGGING
    - log_level, log_format ("text" or "json" access lines)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 8080
    backlog: int = 128
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0

    max_request_size: int = 64 * 1024
    """
    Upper bound on request head plus body. File requests carry no body, so
    this only has to fit the headers.
    """

    # ─────────────────────────────────────────────────────────────────────
    # WORKERS
    # ─────────────────────────────────────────────────────────────────────

    max_workers: int = 16

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    server_name: str = DEFAULT_SERVER_NAME

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST       Server host (default: 127.0.0.1)
        HTTP_PORT       Server port (default: 8080)
        HTTP_WORKERS    Worker threads (default: 16)
        HTTP_TIMEOUT    Socket timeout in seconds (default: 30)
        HTTP_LOG_LEVEL  Logging level (default: INFO)
        HTTP_LOG_FORMAT Access log format, text or json (default: text)
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            max_workers=int(os.getenv("HTTP_WORKERS", "16")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> None:
        """Fail fast on values the server cannot run with."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")


@dataclass
class StaticConfig:
    """
    What to serve and how to label it.

    Attributes:
        root: Directory to serve. Canonicalized once, at startup.
        url_prefix: Mount point; "/static" serves "/static/a.txt".
        index_file: File served for a directory request, e.g. "index.html".
            None means directory requests are 404.
        default_mime_type: Content-Type for unknown extensions.
        mime_overrides: Extension (no dot) to MIME type, consulted before
            the built-in table.
        chunk_size: Bytes per read while streaming a body.
        serve_hidden_files: Serve path segments starting with ".".
    """

    root: str = "."
    url_prefix: str = "/static"
    index_file: Optional[str] = None
    default_mime_type: str = DEFAULT_MIME_TYPE
    mime_overrides: Dict[str, str] = field(default_factory=dict)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    serve_hidden_files: bool = False

    @classmethod
    def from_env(cls) -> "StaticConfig":
        """
        Create configuration from environment variables.

        STATIC_ROOT              Directory to serve (default: .)
        STATIC_URL_PREFIX        Mount point (default: /static)
        STATIC_INDEX_FILE        Directory index file (default: none)
        STATIC_DEFAULT_MIME_TYPE Fallback Content-Type
        STATIC_MIME_OVERRIDES    ".ext=type,.ext2=type2"
        STATIC_CHUNK_SIZE        Streaming chunk size in bytes (default: 65536)
        STATIC_SERVE_HIDDEN      Serve dotfiles, "true" or "false" (default: false)
        """
        return cls(
            root=os.getenv("STATIC_ROOT", "."),
            url_prefix=os.getenv("STATIC_URL_PREFIX", "/static"),
            index_file=os.getenv("STATIC_INDEX_FILE") or None,
            default_mime_type=os.getenv("STATIC_DEFAULT_MIME_TYPE", DEFAULT_MIME_TYPE),
            mime_overrides=parse_mime_overrides(os.getenv("STATIC_MIME_OVERRIDES", "")),
            chunk_size=int(os.getenv("STATIC_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            serve_hidden_files=parse_flag(os.getenv("STATIC_SERVE_HIDDEN", "false")),
        )

    def serve_root(self) -> ServeRoot:
        """Canonicalize `root`. Raises ConfigurationError if it is unusable."""
        return ServeRoot.from_path(self.root)

    def validate(self) -> None:
        """
        Fail fast on a bad configuration.

        Raises:
            ConfigurationError: Root missing or not a directory, bad prefix,
                index file that is not a plain file name, chunk size < 1.
        """
        self.serve_root()

        if not self.url_prefix.startswith("/"):
            raise ConfigurationError(f"url_prefix must start with '/': {self.url_prefix!r}")

        if self.index_file is not None:
            name = self.index_file
            if (
                not name
                or name in (".", "..")
                or "/" in name
                or "\\" in name
                or "\x00" in name
            ):
                raise ConfigurationError(f"index_file must be a plain file name: {name!r}")

        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size must be >= 1")

        if not self.default_mime_type:
            raise ConfigurationError("default_mime_type must not be empty")

"""
=============================================================================
STATICSERVE CLI ENTRY POINT
=============================================================================

    # Serve the current directory at http://127.0.0.1:8080/static/
    python -m staticserve

    # Serve ./public at the site root, with index.html for directories
    python -m staticserve ./public --prefix / --index index.html

    # Extra MIME types, JSON access log
    python -m staticserve ./dist --mime .mjs=text/javascript --log-format json

Environment variables (see staticserve.config) supply the defaults;
command-line flags override them.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from . import __version__
from .config import ServerConfig, StaticConfig, parse_mime_overrides
from .files.resolver import ConfigurationError
from .server import create_app


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserve",
        description="Serve a directory over HTTP/1.1 with ranges and conditional requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserve                          # ./ at /static
  python -m staticserve ./public --prefix /      # ./public at /
  python -m staticserve ./site --index index.html
        """,
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to serve (default: $STATIC_ROOT or .)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None, help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port (default: 8080)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Worker threads (default: 16)")

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--prefix", default=None, help="URL prefix (default: /static)")
    parser.add_argument("--index", default=None, help="Index file for directory requests")
    parser.add_argument(
        "--mime",
        action="append",
        default=[],
        metavar=".EXT=TYPE",
        help="Extra MIME mapping, repeatable",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        default=None,
        help="Serve dotfiles (default: refused)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)",
    )
    parser.add_argument("--version", "-v", action="version", version=f"staticserve {__version__}")

    return parser


def build_configs(args: argparse.Namespace) -> Tuple[ServerConfig, StaticConfig]:
    """Environment defaults, overridden by whatever flags were given."""
    config = ServerConfig.from_env()
    static_config = StaticConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.max_workers = args.workers
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    if args.root is not None:
        static_config.root = args.root
    if args.prefix is not None:
        static_config.url_prefix = args.prefix
    if args.index is not None:
        static_config.index_file = args.index
    if args.hidden is not None:
        static_config.serve_hidden_files = args.hidden
    for mapping in args.mime:
        static_config.mime_overrides.update(parse_mime_overrides(mapping))

    return config, static_config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config, static_config = build_configs(args)
        server = create_app(config, static_config)
    except (ConfigurationError, ValueError) as e:
        print(f"staticserve: {e}", file=sys.stderr)
        return 2

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps file extensions to the Content-Type a served file is labelled with.

The lookup is purely by extension. The file's bytes are never inspected:
content sniffing lets an uploaded "image" be labelled text/html by a
heuristic and executed by the browser, and it makes the label depend on
which bytes happened to be read first.

    Lookup order for "Report.PDF":

        1. lowercase the extension          → ".pdf"
        2. configured overrides             → (none)
        3. built-in table                   → "application/pdf"
        4. configured default               → application/octet-stream

Unknown extensions fall back to application/octet-stream, which browsers
treat as "download, don't render".

=============================================================================
"""

from pathlib import Path
from typing import Dict, Mapping, Optional, Union


# Extensions are lowercase and include the leading dot.
MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # Audio / video (the main consumers of Range requests)
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",

    # Documents and archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",

    ".wasm": "application/wasm",
    ".map": "application/json",     # Source maps
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def normalize_extension(extension: str) -> str:
    """
    Normalize an extension key: lowercase, with a leading dot.

        >>> normalize_extension("MP4")
        '.mp4'
    """
    extension = extension.strip().lower()
    if not extension.startswith("."):
        extension = "." + extension
    return extension


class MimeTypes:
    """
    Extension → MIME type table with per-deployment overrides.

    Instances are immutable after construction and safe to share between
    worker threads.

    Usage:
        mime = MimeTypes(overrides={".log": "text/plain"})
        mime.lookup("server.log")       # 'text/plain'
        mime.lookup("blob.xyz")         # 'application/octet-stream'
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        default: str = DEFAULT_MIME_TYPE,
    ):
        table: Dict[str, str] = dict(MIME_TYPES)
        for extension, mime_type in (overrides or {}).items():
            table[normalize_extension(extension)] = mime_type
        self._table = table
        self.default = default

    def lookup(self, path: Union[str, Path]) -> str:
        """Get the MIME type for a file name or path."""
        suffix = Path(path).suffix.lower()
        return self._table.get(suffix, self.default)

    def __contains__(self, extension: str) -> bool:
        return normalize_extension(extension) in self._table

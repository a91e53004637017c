"""
=============================================================================
PATH RESOLVER
=============================================================================

Turns an untrusted request path into a file that is guaranteed to live
inside the serving root, or into a rejection.

=============================================================================
THE TWO DEFENCES
=============================================================================

    GET /static/../../etc/passwd

    ┌─────────────────────────────────────────────────────────────────────┐
    │  1. LEXICAL CHECK (before touching the filesystem)                  │
    │                                                                      │
    │     "../../etc/passwd" → ["..", "..", "etc", "passwd"]              │
    │                           ──                                         │
    │                           └── "." / ".." segments are rejected      │
    │                                                                      │
    │     Segments are split BEFORE percent-decoding, so "%2e%2e" is      │
    │     caught as ".." and "a%2Fb" can never smuggle in a separator.    │
    │                                                                      │
    │  2. CANONICAL CHECK (after following symlinks)                      │
    │                                                                      │
    │     realpath("/srv/www/link")  → "/etc/shadow"                      │
    │     "/etc/shadow".startswith("/srv/www" + "/")  → False → reject    │
    │                                                                      │
    │     The prefix test is separator-bounded: a root of /var/www does  │
    │     not accept /var/wwwdata.                                        │
    └─────────────────────────────────────────────────────────────────────┘

Either check alone has holes: the lexical one knows nothing about
symlinks, the canonical one depends on realpath agreeing with how the
kernel later opens the file. Both run on every request.

=============================================================================
REJECTION KINDS
=============================================================================

    MALFORMED   bad percent-escape, non-UTF-8, NUL, "a//b"      → 400
    NOT_FOUND   nothing there, or a directory without an index  → 404
    FORBIDDEN   traversal, symlink escape, hidden or special    → 404
    IO_ERROR    permission denied, transient stat failure       → 500

Rejections are plain values. This module never logs and never raises for
a bad request; the handler decides what to log.

=============================================================================
"""

import errno
import os
import re
import stat
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import unquote_to_bytes


class ConfigurationError(ValueError):
    """Raised at startup when the serving root is unusable."""


class RejectionKind(Enum):
    """Why a request path did not resolve to a servable file."""

    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class Rejected:
    """A failed resolution. `reason` is for logs, never for the client."""

    kind: RejectionKind
    reason: str


@dataclass(frozen=True)
class ServeRoot:
    """
    The directory no response may escape.

    Always absolute and canonical (symlinks in the root itself are resolved
    once, at configuration time). Build it with `ServeRoot.from_path()`.
    """

    path: str

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"]) -> "ServeRoot":
        """
        Canonicalize and validate a configured root directory.

        Raises:
            ConfigurationError: If the path is empty, missing, or not a
                directory.
        """
        raw = os.fspath(path)
        if not raw:
            raise ConfigurationError("Serve root must not be empty")

        canonical = os.path.realpath(os.path.abspath(raw))
        if not os.path.isdir(canonical):
            raise ConfigurationError(f"Serve root is not a directory: {raw}")

        return cls(canonical)

    def contains(self, candidate: str) -> bool:
        """
        Check that a canonical path is the root or lies below it.

        Compared as separator-bounded prefixes, so /var/www contains
        /var/www/a but not /var/wwwdata.
        """
        if candidate == self.path:
            return True
        prefix = self.path if self.path.endswith(os.sep) else self.path + os.sep
        return candidate.startswith(prefix)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ResolvedFile:
    """
    A regular file inside the serving root, with the metadata captured by
    the same stat() call that proved it exists.
    """

    path: str
    size: int
    mtime: float
    mtime_ns: int
    inode: int = 0

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "ResolvedFile":
        return cls(
            path=path,
            size=st.st_size,
            mtime=st.st_mtime,
            mtime_ns=st.st_mtime_ns,
            inode=st.st_ino,
        )

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


Resolution = Union[ResolvedFile, Rejected]


# A '%' that is not followed by two hex digits.
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# stat() failures that simply mean "there is no such file here".
_MISSING_ERRNOS = {errno.ENOENT, errno.ENOTDIR, errno.ELOOP, errno.ENAMETOOLONG}

# Following a directory to its index file happens at most this many times.
MAX_INDEX_HOPS = 1


def decode_segment(raw: str) -> Optional[str]:
    """
    Strictly percent-decode one path segment.

    Returns None for an invalid escape, bytes that are not UTF-8, or an
    embedded NUL.

        >>> decode_segment("hello%20world.txt")
        'hello world.txt'
        >>> decode_segment("bad%zz") is None
        True
    """
    if _BAD_ESCAPE.search(raw):
        return None
    try:
        decoded = unquote_to_bytes(raw).decode("utf-8")
    except UnicodeDecodeError:
        return None
    if "\x00" in decoded:
        return None
    return decoded


def split_request_path(
    request_path: str,
    serve_hidden: bool = False,
) -> Union[List[str], Rejected]:
    """
    Split and decode a request path into safe segments (lexical check).

    One leading and one trailing "/" are allowed. An empty list means the
    root itself.

        >>> split_request_path("/css/site.css")
        ['css', 'site.css']
        >>> split_request_path("/../etc/passwd").kind
        <RejectionKind.FORBIDDEN: 'forbidden'>
    """
    path = request_path
    if path.startswith("/"):
        path = path[1:]
    if path.endswith("/"):
        path = path[:-1]
    if not path:
        return []

    segments = []
    for raw in path.split("/"):
        if raw == "":
            return Rejected(RejectionKind.MALFORMED, f"Empty segment in {request_path!r}")

        segment = decode_segment(raw)
        if segment is None:
            return Rejected(RejectionKind.MALFORMED, f"Invalid encoding in {request_path!r}")

        if segment in (".", ".."):
            return Rejected(RejectionKind.FORBIDDEN, f"Dot segment in {request_path!r}")
        if "/" in segment or "\\" in segment:
            return Rejected(RejectionKind.FORBIDDEN, f"Encoded separator in {request_path!r}")
        if segment.startswith(".") and not serve_hidden:
            return Rejected(RejectionKind.FORBIDDEN, f"Hidden path in {request_path!r}")

        segments.append(segment)

    return segments


def resolve(
    root: ServeRoot,
    request_path: str,
    index_file: Optional[str] = None,
    serve_hidden: bool = False,
) -> Resolution:
    """
    Resolve a request path against the serving root.

    Args:
        root: Canonical serving root.
        request_path: Path captured after the mount prefix, still
            percent-encoded.
        index_file: File name tried when the path names a directory.
            None disables directory requests entirely.
        serve_hidden: Allow segments starting with ".".

    Returns:
        ResolvedFile on success, Rejected otherwise.
    """
    segments = split_request_path(request_path, serve_hidden=serve_hidden)
    if isinstance(segments, Rejected):
        return segments

    candidate = os.path.join(root.path, *segments)

    for hop in range(MAX_INDEX_HOPS + 1):
        canonical = os.path.realpath(candidate)

        if not root.contains(canonical):
            return Rejected(RejectionKind.FORBIDDEN, f"{request_path!r} escapes the serve root")

        try:
            st = os.stat(canonical)
        except PermissionError as e:
            return Rejected(RejectionKind.IO_ERROR, f"stat {canonical}: {e}")
        except OSError as e:
            if e.errno in _MISSING_ERRNOS:
                return Rejected(RejectionKind.NOT_FOUND, f"No such file: {canonical}")
            return Rejected(RejectionKind.IO_ERROR, f"stat {canonical}: {e}")

        if stat.S_ISDIR(st.st_mode):
            if index_file is None or hop == MAX_INDEX_HOPS:
                return Rejected(RejectionKind.NOT_FOUND, f"Directory without index: {canonical}")
            candidate = os.path.join(canonical, index_file)
            continue

        if not stat.S_ISREG(st.st_mode):
            return Rejected(RejectionKind.FORBIDDEN, f"Not a regular file: {canonical}")

        return ResolvedFile.from_stat(canonical, st)

    # The loop always returns; kept for type checkers.
    return Rejected(RejectionKind.NOT_FOUND, f"Unresolvable: {request_path!r}")

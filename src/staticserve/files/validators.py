"""
=============================================================================
VALIDATORS
=============================================================================

Entity tags and Last-Modified timestamps, recomputed from the file's
current metadata on every request.

=============================================================================
ETAG FORMAT
=============================================================================

    ETag: "2a1f3-18c6f0a1b2c3d4e5-5"
           ──┬── ───────┬──────── ┬
             │          │         └── size in hex
             │          └──────────── mtime in nanoseconds, hex
             └─────────────────────── inode in hex

The tag is strong: two files with the same tag are served byte-for-byte
identical as far as this server can tell. The inode catches a file
replaced by another of the same size and timestamp. Using nanoseconds
means a file rewritten twice within the same second still changes its
tag; the Last-Modified header cannot express that (HTTP-dates have
one-second granularity), which is why the tag is checked first.

=============================================================================
COMPARISON RULES (RFC 7232 §2.3.2)
=============================================================================

    ┌──────────────┬──────────────┬─────────────┬─────────────┐
    │  Tag A       │  Tag B       │  Strong     │  Weak       │
    ├──────────────┼──────────────┼─────────────┼─────────────┤
    │  W/"1"       │  W/"1"       │  no match   │  match      │
    │  W/"1"       │  "1"         │  no match   │  match      │
    │  "1"         │  "1"         │  match      │  match      │
    │  "1"         │  "2"         │  no match   │  no match   │
    └──────────────┴──────────────┴─────────────┴─────────────┘

If-Match and If-Range use strong comparison. If-None-Match uses weak.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

from ..http.response import format_http_date
from .resolver import ResolvedFile


def parse_http_date(value: str) -> Optional[datetime]:
    """
    Parse an HTTP-date header value into an aware UTC datetime.

    Accepts the three formats RFC 7231 requires recipients to understand
    (IMF-fixdate, RFC 850, asctime). Returns None for anything else; an
    unparseable conditional date is treated as if the header were absent.
    """
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class EntityTag:
    """A parsed entity tag: opaque value plus the weak flag."""

    value: str
    weak: bool = False

    @classmethod
    def parse(cls, raw: str) -> Optional["EntityTag"]:
        raw = raw.strip()
        weak = False
        if raw.startswith("W/"):
            weak = True
            raw = raw[2:]
        if len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
            return None
        return cls(raw[1:-1], weak)

    def strong_match(self, other: "EntityTag") -> bool:
        return not self.weak and not other.weak and self.value == other.value

    def weak_match(self, other: "EntityTag") -> bool:
        return self.value == other.value

    def __str__(self) -> str:
        return f'{"W/" if self.weak else ""}"{self.value}"'


def parse_etag_list(header: str) -> Optional[List[EntityTag]]:
    """
    Parse an If-Match / If-None-Match value.

    Returns None for "*" (matches any current representation), otherwise
    the list of well-formed tags. Malformed members are skipped.

        >>> parse_etag_list('"a", W/"b"')
        [EntityTag(value='a', weak=False), EntityTag(value='b', weak=True)]
    """
    if header.strip() == "*":
        return None

    tags = []
    # Tags are quoted strings that cannot contain '"', so splitting on
    # commas outside quotes is enough.
    current = []
    in_quotes = False
    for char in header:
        if char == '"':
            in_quotes = not in_quotes
        if char == "," and not in_quotes:
            tag = EntityTag.parse("".join(current))
            if tag is not None:
                tags.append(tag)
            current = []
            continue
        current.append(char)
    tag = EntityTag.parse("".join(current))
    if tag is not None:
        tags.append(tag)
    return tags


@dataclass(frozen=True)
class Validators:
    """
    The validators of one file at one moment.

    Attributes:
        etag: Strong entity tag derived from inode, mtime and size.
        last_modified: Modification time truncated to whole seconds, UTC.
    """

    etag: EntityTag
    last_modified: datetime

    @classmethod
    def for_file(cls, file: ResolvedFile) -> "Validators":
        etag = EntityTag(f"{file.inode:x}-{file.mtime_ns:x}-{file.size:x}")
        last_modified = datetime.fromtimestamp(int(file.mtime), tz=timezone.utc)
        return cls(etag=etag, last_modified=last_modified)

    @property
    def etag_header(self) -> str:
        return str(self.etag)

    @property
    def last_modified_header(self) -> str:
        return format_http_date(self.last_modified)

    def matches_any(self, header: str, strong: bool) -> bool:
        """
        Evaluate an If-Match (strong) or If-None-Match (weak) header.

        "*" matches, since the file exists.
        """
        tags = parse_etag_list(header)
        if tags is None:
            return True
        if strong:
            return any(tag.strong_match(self.etag) for tag in tags)
        return any(tag.weak_match(self.etag) for tag in tags)

    def modified_since(self, since: datetime) -> bool:
        """True if the file changed after `since` (one-second granularity)."""
        return self.last_modified > since.replace(microsecond=0)

    def if_range_matches(self, header: str) -> bool:
        """
        Evaluate an If-Range value: an entity tag (strong comparison) or an
        HTTP-date that must equal Last-Modified exactly.
        """
        header = header.strip()
        if header.startswith('"') or header.startswith("W/"):
            tag = EntityTag.parse(header)
            return tag is not None and tag.strong_match(self.etag)

        date = parse_http_date(header)
        return date is not None and date == self.last_modified

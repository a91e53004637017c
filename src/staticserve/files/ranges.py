"""
=============================================================================
BYTE RANGES (RFC 7233)
=============================================================================

Parses a single `Range: bytes=...` header and validates it against the
current file size.

    ┌────────────────────┬───────────────────────┬────────────────────────┐
    │  Header            │  5-byte file "hello"  │  Result                │
    ├────────────────────┼───────────────────────┼────────────────────────┤
    │  bytes=2-3         │  "ll"                 │  206  bytes 2-3/5      │
    │  bytes=2-          │  "llo"                │  206  bytes 2-4/5      │
    │  bytes=-2          │  "lo"                 │  206  bytes 3-4/5      │
    │  bytes=1-999       │  "ello"               │  206  end clamped      │
    │  bytes=-999        │  "hello"              │  206  whole file       │
    │  bytes=10-20       │                       │  416  bytes */5        │
    │  bytes=-0          │                       │  416                   │
    │  bytes=0-1,3-4     │  "hello"              │  200  multi-range      │
    │  items=0-1         │  "hello"              │  200  unknown unit     │
    │  bytes=4-2         │                       │  400  malformed        │
    └────────────────────┴───────────────────────┴────────────────────────┘

Multiple ranges fall back to a full 200 response instead of a
multipart/byteranges body.

=============================================================================
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RangeOutcome(Enum):
    """What the Range header asks the builder to do."""

    IGNORE = "ignore"               # Serve the full body
    SATISFIABLE = "satisfiable"     # Serve `range_spec`
    UNSATISFIABLE = "unsatisfiable" # 416
    MALFORMED = "malformed"         # 400


@dataclass(frozen=True)
class RangeSpec:
    """An inclusive byte interval [start, end] within the file."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


@dataclass(frozen=True)
class RangeResult:
    outcome: RangeOutcome
    range_spec: Optional[RangeSpec] = None


_BYTE_RANGE = re.compile(r"^([0-9]*)-([0-9]*)$")


def parse_range(header: str, size: int) -> RangeResult:
    """
    Interpret a Range header for a file of `size` bytes.

    Args:
        header: Raw Range header value, e.g. "bytes=0-499".
        size: Current file size in bytes.

    Returns:
        RangeResult describing whether to ignore the header, serve a
        clamped range, answer 416, or answer 400.
    """
    unit, sep, spec = header.strip().partition("=")
    if not sep or unit.strip().lower() != "bytes":
        return RangeResult(RangeOutcome.IGNORE)

    spec = spec.strip()
    if "," in spec:
        return RangeResult(RangeOutcome.IGNORE)

    match = _BYTE_RANGE.match(spec)
    if not match:
        return RangeResult(RangeOutcome.MALFORMED)

    first, last = match.groups()

    if first == "":
        # Suffix form "-N": the last N bytes.
        if last == "":
            return RangeResult(RangeOutcome.MALFORMED)
        suffix = int(last)
        if suffix == 0 or size == 0:
            return RangeResult(RangeOutcome.UNSATISFIABLE)
        start = max(size - suffix, 0)
        return RangeResult(RangeOutcome.SATISFIABLE, RangeSpec(start, size - 1))

    start = int(first)
    if last != "":
        end = int(last)
        if end < start:
            return RangeResult(RangeOutcome.MALFORMED)
    else:
        end = size - 1

    if start >= size:
        return RangeResult(RangeOutcome.UNSATISFIABLE)

    return RangeResult(RangeOutcome.SATISFIABLE, RangeSpec(start, min(end, size - 1)))

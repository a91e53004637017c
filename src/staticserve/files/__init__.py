"""
File resolution and response construction.

    resolver    request path  → ResolvedFile | Rejected
    builder     ResolvedFile  → ResponseDescriptor
    stream      descriptor    → bounded chunks of file bytes

Nothing in this package logs, caches, or keeps state between requests.
"""

from .resolver import (
    ConfigurationError,
    Rejected,
    RejectionKind,
    ResolvedFile,
    ServeRoot,
    resolve,
)
from .validators import EntityTag, Validators, format_http_date, parse_http_date
from .ranges import RangeOutcome, RangeResult, RangeSpec, parse_range
from .builder import (
    ConditionalHeaders,
    ResponseDescriptor,
    build,
    describe_rejection,
)
from .stream import DEFAULT_CHUNK_SIZE, FileWindow


__all__ = [
    "ConfigurationError",
    "Rejected",
    "RejectionKind",
    "ResolvedFile",
    "ServeRoot",
    "resolve",
    "EntityTag",
    "Validators",
    "format_http_date",
    "parse_http_date",
    "RangeOutcome",
    "RangeResult",
    "RangeSpec",
    "parse_range",
    "ConditionalHeaders",
    "ResponseDescriptor",
    "build",
    "describe_rejection",
    "DEFAULT_CHUNK_SIZE",
    "FileWindow",
]

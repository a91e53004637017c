"""
=============================================================================
RESPONSE BUILDER
=============================================================================

Decides what to send for a resolved file: the full body, one byte range,
a 304, or an error status. The result is a ResponseDescriptor; writing
bytes to the network is somebody else's job.

=============================================================================
DECISION FLOW
=============================================================================

    Resolved
       │
       ├── If-Match present, no strong match ─────────────► 412
       ├── If-Unmodified-Since, modified after ───────────► 412
       │
       ├── If-None-Match present, weak match ─────────────► 304
       ├── (no If-None-Match) If-Modified-Since, not modified ► 304
       │
       └── Range present and If-Range (if any) matches?
              │
              ├── no / ignored ───────────────────────────► 200 full
              ├── malformed ──────────────────────────────► 400
              ├── start past end of file ─────────────────► 416
              └── satisfiable ────────────────────────────► 206 [start, end]

Both 412 checks always run. If-Modified-Since is only consulted when
If-None-Match is absent (RFC 7232 §6): the entity tag is the more precise
validator.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from ..http.mime_types import MimeTypes
from ..http.status_codes import HTTPStatus
from .ranges import RangeOutcome, RangeSpec, parse_range
from .resolver import Rejected, RejectionKind, ResolvedFile
from .validators import Validators, parse_http_date


_DEFAULT_MIME_TYPES = MimeTypes()


@dataclass(frozen=True)
class ConditionalHeaders:
    """The request headers that influence a file response."""

    if_match: Optional[str] = None
    if_none_match: Optional[str] = None
    if_modified_since: Optional[str] = None
    if_unmodified_since: Optional[str] = None
    if_range: Optional[str] = None
    range: Optional[str] = None

    @classmethod
    def from_mapping(cls, headers: Optional[Mapping[str, str]]) -> "ConditionalHeaders":
        """Pick the relevant headers out of any mapping, case-insensitively."""
        lowered = {name.lower(): value for name, value in (headers or {}).items()}
        return cls(
            if_match=lowered.get("if-match"),
            if_none_match=lowered.get("if-none-match"),
            if_modified_since=lowered.get("if-modified-since"),
            if_unmodified_since=lowered.get("if-unmodified-since"),
            if_range=lowered.get("if-range"),
            range=lowered.get("range"),
        )


@dataclass
class ResponseDescriptor:
    """
    Everything needed to write one file response.

    Attributes:
        status: Status code to send.
        headers: Response headers (Content-Type, Content-Length, ...).
        path: File to stream from, when there is a body.
        window: Inclusive byte interval of `path` to stream, or None for a
            response without a body.
    """

    status: HTTPStatus
    headers: Dict[str, str] = field(default_factory=dict)
    path: Optional[str] = None
    window: Optional[RangeSpec] = None

    @property
    def has_body(self) -> bool:
        return self.window is not None

    @property
    def content_length(self) -> int:
        return self.window.length if self.window is not None else 0


def _empty(status: HTTPStatus, headers: Optional[Dict[str, str]] = None) -> ResponseDescriptor:
    merged = {"Content-Length": "0"}
    merged.update(headers or {})
    return ResponseDescriptor(status=status, headers=merged)


def describe_rejection(rejected: Rejected) -> ResponseDescriptor:
    """
    Map a resolver rejection to a bodiless error response.

    NOT_FOUND and FORBIDDEN are deliberately identical on the wire.
    """
    if rejected.kind is RejectionKind.MALFORMED:
        return _empty(HTTPStatus.BAD_REQUEST)
    if rejected.kind is RejectionKind.IO_ERROR:
        return _empty(HTTPStatus.INTERNAL_SERVER_ERROR)
    return _empty(HTTPStatus.NOT_FOUND)


def evaluate_preconditions(
    validators: Validators,
    headers: ConditionalHeaders,
) -> Optional[HTTPStatus]:
    """
    Run the conditional headers in RFC 7232 order.

    Returns 412 or 304 when a precondition decides the response, None to
    carry on to range evaluation.
    """
    if headers.if_match is not None:
        if not validators.matches_any(headers.if_match, strong=True):
            return HTTPStatus.PRECONDITION_FAILED
    if headers.if_unmodified_since is not None:
        since = parse_http_date(headers.if_unmodified_since)
        if since is not None and validators.modified_since(since):
            return HTTPStatus.PRECONDITION_FAILED

    if headers.if_none_match is not None:
        if validators.matches_any(headers.if_none_match, strong=False):
            return HTTPStatus.NOT_MODIFIED
    elif headers.if_modified_since is not None:
        since = parse_http_date(headers.if_modified_since)
        if since is not None and not validators.modified_since(since):
            return HTTPStatus.NOT_MODIFIED

    return None


def build(
    file: ResolvedFile,
    request_headers: Optional[Mapping[str, str]] = None,
    mime_types: Optional[MimeTypes] = None,
) -> ResponseDescriptor:
    """
    Build the response for a resolved file.

    Args:
        file: Output of the path resolver.
        request_headers: Request headers (any case) or ConditionalHeaders.
        mime_types: Extension table; the built-in table when omitted.

    Returns:
        ResponseDescriptor for exactly one of 200, 206, 304, 400, 412, 416.
    """
    if isinstance(request_headers, ConditionalHeaders):
        headers = request_headers
    else:
        headers = ConditionalHeaders.from_mapping(request_headers)

    validators = Validators.for_file(file)
    validator_headers = {
        "ETag": validators.etag_header,
        "Last-Modified": validators.last_modified_header,
    }

    decided = evaluate_preconditions(validators, headers)
    if decided is HTTPStatus.NOT_MODIFIED:
        return ResponseDescriptor(status=HTTPStatus.NOT_MODIFIED, headers=validator_headers)
    if decided is HTTPStatus.PRECONDITION_FAILED:
        return _empty(HTTPStatus.PRECONDITION_FAILED)

    content_type = (mime_types or _DEFAULT_MIME_TYPES).lookup(file.path)
    ok_headers = {
        "Content-Type": content_type,
        "Accept-Ranges": "bytes",
        **validator_headers,
    }

    if headers.range is not None and (
        headers.if_range is None or validators.if_range_matches(headers.if_range)
    ):
        result = parse_range(headers.range, file.size)

        if result.outcome is RangeOutcome.MALFORMED:
            return _empty(HTTPStatus.BAD_REQUEST)

        if result.outcome is RangeOutcome.UNSATISFIABLE:
            return _empty(
                HTTPStatus.RANGE_NOT_SATISFIABLE,
                {"Content-Range": f"bytes */{file.size}"},
            )

        if result.outcome is RangeOutcome.SATISFIABLE:
            window = result.range_spec
            return ResponseDescriptor(
                status=HTTPStatus.PARTIAL_CONTENT,
                headers={
                    **ok_headers,
                    "Content-Length": str(window.length),
                    "Content-Range": window.content_range(file.size),
                },
                path=file.path,
                window=window,
            )

    # An empty file has no bytes to stream; keep window None so nothing is
    # opened.
    window = RangeSpec(0, file.size - 1) if file.size > 0 else None
    return ResponseDescriptor(
        status=HTTPStatus.OK,
        headers={**ok_headers, "Content-Length": str(file.size)},
        path=file.path,
        window=window,
    )

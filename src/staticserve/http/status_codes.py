"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes a file server actually emits, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK               - Full file body                     │
    │        │ 206 Partial Content  - One byte range of the file         │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ 304 Not Modified     - Client copy is still current       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request      - Malformed path or Range header     │
    │        │ 404 Not Found        - Missing file, or a path that tried │
    │        │                        to leave the serving root          │
    │        │ 405 Method Not Allowed                                    │
    │        │ 408 Request Timeout                                       │
    │        │ 412 Precondition Failed - If-Match / If-Unmodified-Since  │
    │        │ 413 Payload Too Large                                     │
    │        │ 416 Range Not Satisfiable                                 │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - Filesystem I/O failure        │
    │        │ 503 Service Unavailable   - Worker pool saturated         │
    │        │ 505 HTTP Version Not Supported                            │
    └────────┴───────────────────────────────────────────────────────────┘

403 Forbidden is defined for completeness but file requests never produce
it: a path rejected for safety reasons is reported exactly like a missing
file, so a client cannot probe which paths exist outside the root.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial Content'
    """

    OK = 200
    PARTIAL_CONTENT = 206               # Range request fulfilled

    NOT_MODIFIED = 304                  # Cached version is still valid

    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PRECONDITION_FAILED = 412           # If-Match / If-Unmodified-Since failed
    PAYLOAD_TOO_LARGE = 413
    RANGE_NOT_SATISFIABLE = 416         # Range starts past end of file

    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 206 Partial Content
                     ─── ───────────────
                      │         │
                      │         └── Reason phrase
                      └──────────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """
        Whether a response with this status may carry a message body.

        304 responses never have a body (RFC 7232 §4.1).
        """
        return self != HTTPStatus.NOT_MODIFIED


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PRECONDITION_FAILED: "Precondition Failed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}

"""
=============================================================================
HTTP RESPONSE
=============================================================================

Serializes responses to the wire, either with an in-memory body (error
pages) or with a streamed body (files).

    HTTP/1.1 206 Partial Content\r\n      ← status line
    Content-Type: video/mp4\r\n
    Content-Range: bytes 0-65535/1048576\r\n
    Content-Length: 65536\r\n
    Date: Wed, 01 Jan 2026 12:00:00 GMT\r\n
    Server: staticserve/1.0\r\n
    \r\n
    <65536 bytes, written chunk by chunk>

=============================================================================
STREAMED BODIES
=============================================================================

A file response carries `stream`, an iterable of byte chunks, instead of
`body`. The head is serialized with `head_bytes()`, then the connection
writes each chunk as it is produced. Content-Length comes from the file
response builder, never from len(body).

Whoever sends the response must call `close()` when done (or when the
client goes away) so the underlying file handle is released.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union
import json

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "staticserve/1.0"


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are ALWAYS in GMT. Aware datetimes are converted; naive ones
    are assumed to already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be written to a socket.

    Attributes:
        status: Status code.
        headers: Response headers.
        body: In-memory body (ignored when `stream` is set).
        stream: Iterable of body chunks, e.g. a FileWindow.
        version: HTTP version for the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    stream: Optional[Iterable[bytes]] = field(default=None, repr=False)
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        declared = self.headers.get("Content-Length")
        if declared is not None:
            return int(declared)
        return len(self.body)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def head_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize the status line and headers, including the blank line.

        Adds Content-Length (unless the status forbids a body), Date and
        Server when they are missing.
        """
        response_headers = dict(self.headers)

        if self.status.allows_body and "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return "\r\n".join(lines).encode("latin-1") + b"\r\n"

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """Serialize head plus in-memory body in one piece."""
        return self.head_bytes(server_name) + self.body

    def iter_body(self) -> Iterable[bytes]:
        """Yield the body: the stream's chunks, or the in-memory body."""
        if self.stream is not None:
            yield from self.stream
        elif self.body:
            yield self.body

    def close(self) -> None:
        """Release whatever the stream holds open. Safe to call twice."""
        close = getattr(self.stream, "close", None)
        if close is not None:
            close()


class ResponseBuilder:
    """
    Fluent builder for responses that are not files (errors, probes).

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .json({"error": "Not Found"})
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are UTF-8 encoded."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        self._headers["Content-Type"] = "text/plain; charset=utf-8"
        return self.body(text)

    def json(self, data: Any) -> "ResponseBuilder":
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self.body(json.dumps(data))

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def error_response(status: HTTPStatus, message: Optional[str] = None) -> HTTPResponse:
    """
    JSON error response used by the server for protocol-level failures
    (parse errors, timeouts, overload). File errors never use this: they
    are bodiless so they reveal nothing about the filesystem.
    """
    return (ResponseBuilder()
        .status(status)
        .json({"error": message or status.phrase})
        .build())

"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into HTTPRequest objects.

    GET /static/docs/a%20b.txt?v=2 HTTP/1.1\r\n
    ─┬─ ───────────┬────────── ─┬─ ────┬───
     │             │            │      │
   Method         Path        Query  Version

=============================================================================
WHY THE PATH STAYS ENCODED
=============================================================================

The path is NOT percent-decoded here. Decoding before routing would turn
"/static/a%2F..%2Fsecret" into "/static/a/../secret" and hand the file
resolver a different set of segments than the client sent. The resolver
splits on "/" first and decodes each segment itself, strictly.

For the same reason the parser does not reject ".." in paths: a traversal
attempt is answered with the same 404 as a missing file, which is the
resolver's decision, not a 400 from the parser.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
import re


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code to answer with:

        400 Bad Request                 - Malformed request syntax
        405 Method Not Allowed          - Unknown method
        413 Payload Too Large           - Request exceeds size limit
        505 HTTP Version Not Supported  - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method: GET, HEAD, ...
        path: Request path without query string, still percent-encoded.
        version: "HTTP/1.1" or "HTTP/1.0".
        headers: Header names lowercased.
        query_string: Raw query string (without "?").
        body: Raw body bytes (file requests ignore it).
        path_params: Filled in by the router, e.g. {"path": "css/a.css"}.
        client_address: (ip, port) of the client.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple = ("", 0)

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    @property
    def is_keep_alive(self) -> bool:
        """
        Whether the client wants the connection kept open.

            HTTP/1.1: keep alive unless "Connection: close"
            HTTP/1.0: close unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        1. Size check             → 413
        2. Find \\r\\n\\r\\n         → 400 if missing
        3. Request line           → 400 / 405 / 505
        4. Headers                → names lowercased, repeats comma-joined
        5. Body by Content-Length → 400 if short or invalid
    """

    VALID_METHODS = {
        "GET",
        "HEAD",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "OPTIONS",
        "TRACE",
        "CONNECT",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:\s]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        # Header bytes are ASCII by RFC; latin-1 never fails and keeps
        # every byte, so odd bytes surface later as a 400, not a crash.
        header_section = data[:header_end].decode("latin-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_string, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length")
        if content_length < 0:
            raise HTTPParseError("Invalid Content-Length")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_string=query_string,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple:
        """
        Parse "METHOD SP REQUEST-TARGET SP HTTP-VERSION".

        Returns:
            (method, raw_path, query_string, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        # Only origin-form targets ("/path?query") are served.
        if not target.startswith("/"):
            raise HTTPParseError(f"Unsupported request target: {target!r}")

        target, _, _fragment = target.partition("#")
        path, _, query_string = target.partition("?")

        return method, path, query_string, version

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        A repeated header is combined with ", " (RFC 7230 §3.2.2), which is
        also how If-None-Match lists from several lines are merged.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                raise HTTPParseError(f"Invalid header line: {line!r}")

            name, value = match.groups()
            name = name.lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple = ("", 0),
    max_size: int = 10 * 1024 * 1024,
) -> HTTPRequest:
    """Parse one request with a throwaway RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)


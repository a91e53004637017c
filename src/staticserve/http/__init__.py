"""
HTTP protocol pieces: status codes, MIME table, request parsing, response
serialization and routing.
"""

from .status_codes import HTTPStatus
from .mime_types import DEFAULT_MIME_TYPE, MIME_TYPES, MimeTypes
from .request import HTTPParseError, HTTPRequest, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    error_response,
    format_http_date,
)
from .router import Route, RouteMatch, Router


__all__ = [
    "HTTPStatus",
    "DEFAULT_MIME_TYPE",
    "MIME_TYPES",
    "MimeTypes",
    "HTTPParseError",
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "error_response",
    "format_http_date",
    "Route",
    "RouteMatch",
    "Router",
]

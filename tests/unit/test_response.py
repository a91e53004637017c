"""
Unit tests for HTTP response serialization.
"""

import json

from staticserve.http.response import (
    HTTPResponse,
    ResponseBuilder,
    error_response,
)
from staticserve.http.status_codes import HTTPStatus


def split_head(data: bytes):
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


class TestHTTPStatus:
    """Tests for HTTPStatus."""

    def test_phrases(self):
        assert HTTPStatus.PARTIAL_CONTENT.phrase == "Partial Content"
        assert HTTPStatus.RANGE_NOT_SATISFIABLE.phrase == "Range Not Satisfiable"
        assert HTTPStatus.PRECONDITION_FAILED.phrase == "Precondition Failed"

    def test_int_comparison(self):
        assert HTTPStatus.NOT_MODIFIED == 304
        assert HTTPStatus(416) is HTTPStatus.RANGE_NOT_SATISFIABLE

    def test_classes(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_server_error
        assert not HTTPStatus.PARTIAL_CONTENT.is_error

    def test_allows_body(self):
        assert not HTTPStatus.NOT_MODIFIED.allows_body
        assert HTTPStatus.OK.allows_body


class TestHTTPResponse:
    """Tests for HTTPResponse."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.PARTIAL_CONTENT).status_line == "HTTP/1.1 206 Partial Content"

    def test_to_bytes(self):
        response = HTTPResponse(headers={"Content-Type": "text/plain"}, body=b"hi")
        status_line, headers, body = split_head(response.to_bytes())

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Length"] == "2"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Server"] == "staticserve/1.0"
        assert headers["Date"].endswith(" GMT")
        assert body == b"hi"

    def test_declared_content_length_is_kept(self):
        """Streamed responses declare their length up front."""
        response = HTTPResponse(headers={"Content-Length": "1000"}, stream=iter([b"x"]))
        _, headers, _ = split_head(response.head_bytes())

        assert headers["Content-Length"] == "1000"
        assert response.content_length == 1000

    def test_304_gets_no_content_length(self):
        response = HTTPResponse(status=HTTPStatus.NOT_MODIFIED, headers={"ETag": '"x"'})
        _, headers, _ = split_head(response.head_bytes())
        assert "Content-Length" not in headers

    def test_server_name(self):
        _, headers, _ = split_head(HTTPResponse().head_bytes("custom/2.0"))
        assert headers["Server"] == "custom/2.0"

    def test_iter_body_stream(self):
        response = HTTPResponse(stream=[b"ab", b"cd"], body=b"ignored")
        assert list(response.iter_body()) == [b"ab", b"cd"]

    def test_iter_body_in_memory(self):
        assert list(HTTPResponse(body=b"x").iter_body()) == [b"x"]
        assert list(HTTPResponse().iter_body()) == []

    def test_close_closes_stream(self):
        class Closable:
            closed = False

            def __iter__(self):
                return iter([])

            def close(self):
                self.closed = True

        stream = Closable()
        HTTPResponse(stream=stream).close()
        assert stream.closed

    def test_close_without_stream(self):
        HTTPResponse().close()


class TestResponseBuilder:
    """Tests for ResponseBuilder and error_response()."""

    def test_json(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).json({"a": 1}).build()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert json.loads(response.body) == {"a": 1}

    def test_text_and_headers(self):
        response = (ResponseBuilder()
            .text("hi")
            .header("X-A", "1")
            .headers({"X-B": "2"})
            .close_connection()
            .build())

        assert response.body == b"hi"
        assert response.headers["X-A"] == "1"
        assert response.headers["X-B"] == "2"
        assert response.headers["Connection"] == "close"

    def test_error_response(self):
        response = error_response(HTTPStatus.SERVICE_UNAVAILABLE)
        assert response.status == 503
        assert json.loads(response.body) == {"error": "Service Unavailable"}

        response = error_response(HTTPStatus.BAD_REQUEST, "bad")
        assert json.loads(response.body) == {"error": "bad"}

"""
Unit tests for the middleware pipeline and access log.
"""

import json
import logging

import pytest

from staticserve.http.request import HTTPRequest
from staticserve.http.response import HTTPResponse, ResponseBuilder
from staticserve.http.status_codes import HTTPStatus
from staticserve.middleware import (
    LoggingMiddleware,
    Middleware,
    MiddlewarePipeline,
)


def make_request(path: str = "/static/a.txt", headers=None) -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=path,
        headers=headers or {},
        client_address=("10.0.0.1", 5555),
    )


def file_like_handler(request: HTTPRequest) -> HTTPResponse:
    return HTTPResponse(
        status=HTTPStatus.PARTIAL_CONTENT,
        headers={"Content-Length": "2"},
        stream=iter([b"ll"]),
    )


class Recorder(Middleware):
    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:before")
        response = next(request)
        self.calls.append(f"{self.label}:after")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_order(self):
        calls = []
        pipeline = MiddlewarePipeline().use(Recorder("a", calls), Recorder("b", calls))

        def handler(request):
            calls.append("handler")
            return ResponseBuilder().text("ok").build()

        pipeline.wrap(handler)(make_request())

        assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]
        assert len(pipeline) == 2
        assert [mw.label for mw in pipeline] == ["a", "b"]

    def test_empty_pipeline_is_identity(self):
        handler = lambda request: ResponseBuilder().text("ok").build()
        assert MiddlewarePipeline().wrap(handler) is handler

    def test_middleware_can_set_headers(self):
        class NoStore(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("Cache-Control", "no-store")
                return response

        response = MiddlewarePipeline().add(NoStore()).wrap(file_like_handler)(make_request())

        assert response.headers["Cache-Control"] == "no-store"

    def test_short_circuit(self):
        class Deny(Middleware):
            def __call__(self, request, next):
                return ResponseBuilder().status(HTTPStatus.FORBIDDEN).build()

        def handler(request):
            pytest.fail("handler must not run")

        response = MiddlewarePipeline().add(Deny()).wrap(handler)(make_request())
        assert response.status == HTTPStatus.FORBIDDEN


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_text_line(self, caplog):
        middleware = LoggingMiddleware()
        with caplog.at_level(logging.INFO, logger="staticserve.access"):
            response = middleware(make_request(), file_like_handler)

        assert len(caplog.records) == 1
        line = caplog.records[0].getMessage()
        assert line.startswith("10.0.0.1 - - [")
        assert '"GET /static/a.txt" 206 2 ' in line
        assert "X-Request-ID" in response.headers

    def test_json_line(self, caplog):
        middleware = LoggingMiddleware(log_format="json")
        request = make_request(headers={"range": "bytes=2-3", "user-agent": "curl"})
        with caplog.at_level(logging.INFO, logger="staticserve.access"):
            response = middleware(request, file_like_handler)

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["status_code"] == 206
        assert entry["content_length"] == 2
        assert entry["range"] == "bytes=2-3"
        assert entry["user_agent"] == "curl"
        assert entry["request_id"] == response.headers["X-Request-ID"]

    def test_does_not_consume_stream(self):
        response = LoggingMiddleware()(make_request(), file_like_handler)
        assert list(response.iter_body()) == [b"ll"]

    def test_reuses_incoming_request_id(self):
        request = make_request(headers={"x-request-id": "abc123"})
        response = LoggingMiddleware()(request, file_like_handler)
        assert response.headers["X-Request-ID"] == "abc123"

    def test_skip_paths(self, caplog):
        middleware = LoggingMiddleware(skip_paths=["/health"])
        with caplog.at_level(logging.INFO, logger="staticserve.access"):
            middleware(make_request("/health"), file_like_handler)
        assert caplog.records == []

    def test_without_request_id(self):
        response = LoggingMiddleware(include_request_id=False)(make_request(), file_like_handler)
        assert "X-Request-ID" not in response.headers

    def test_logs_and_reraises_errors(self, caplog):
        def boom(request):
            raise RuntimeError("kaput")

        with caplog.at_level(logging.INFO, logger="staticserve.access"):
            with pytest.raises(RuntimeError):
                LoggingMiddleware()(make_request(), boom)

        assert caplog.records[0].levelno == logging.ERROR

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")

"""
Unit tests for the router.
"""

import pytest

from staticserve.http.request import HTTPRequest
from staticserve.http.response import HTTPResponse, ResponseBuilder
from staticserve.http.router import Router, compile_pattern
from staticserve.http.status_codes import HTTPStatus


def echo_params(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().json(request.path_params).build()


class TestCompilePattern:
    """Tests for compile_pattern()."""

    def test_static(self):
        pattern = compile_pattern("/health")
        assert pattern.match("/health")
        assert not pattern.match("/health/x")

    def test_param(self):
        match = compile_pattern("/files/:name").match("/files/a.txt")
        assert match.group("name") == "a.txt"

    def test_wildcard(self):
        pattern = compile_pattern("/static/*path")

        assert pattern.match("/static/css/site.css").group("path") == "css/site.css"
        assert pattern.match("/static/").group("path") == ""
        assert pattern.match("/static").group("path") is None
        assert not pattern.match("/staticfoo")

    def test_root_wildcard(self):
        pattern = compile_pattern("/*path")
        assert pattern.match("/a/b").group("path") == "a/b"

    def test_wildcard_must_be_last(self):
        with pytest.raises(ValueError):
            compile_pattern("/static/*path/more")


class TestRouter:
    """Tests for Router."""

    def test_wildcard_param_is_raw(self):
        """No decoding, no normalization."""
        router = Router()
        router.add_route("/static/*path", echo_params, methods=["GET"])

        match = router.match("GET", "/static/../a%2Fb//c")
        assert match.params == {"path": "../a%2Fb//c"}

    def test_bare_mount(self):
        router = Router()
        router.add_route("/static/*path", echo_params, methods=["GET"])
        assert router.match("GET", "/static").params == {"path": ""}

    def test_handle_sets_path_params(self):
        router = Router()
        router.add_route("/files/:name", echo_params, methods=["GET"])

        response = router.handle(HTTPRequest(method="GET", path="/files/x.txt"))
        assert response.status == HTTPStatus.OK
        assert response.body == b'{"name": "x.txt"}'

    def test_not_found(self):
        router = Router()
        router.add_route("/static/*path", echo_params, methods=["GET"])

        response = router.handle(HTTPRequest(method="GET", path="/elsewhere"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_method_not_allowed(self):
        router = Router()
        router.add_route("/static/*path", echo_params, methods=["GET", "HEAD"])

        response = router.handle(HTTPRequest(method="POST", path="/static/a.txt"))
        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, HEAD"

    def test_any_method(self):
        router = Router()
        router.add_route("/any", echo_params)
        assert router.match("DELETE", "/any") is not None

    def test_decorators(self):
        router = Router()

        @router.get("/health")
        def health(request):
            return ResponseBuilder().text("ok").build()

        assert router.match("GET", "/health").route.handler is health
        assert router.match("HEAD", "/health") is not None
        assert router.match("POST", "/health") is None
        assert len(router.routes) == 1

    def test_first_match_wins(self):
        router = Router()
        first = router.add_route("/static/*path", echo_params, methods=["GET"])
        router.add_route("/static/special", echo_params, methods=["GET"])

        assert router.match("GET", "/static/special").route is first

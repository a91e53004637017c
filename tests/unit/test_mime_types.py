"""
Unit tests for MIME type lookup.
"""

from pathlib import Path

from staticserve.http.mime_types import (
    DEFAULT_MIME_TYPE,
    MimeTypes,
    normalize_extension,
)


class TestMimeTypes:
    """Tests for MimeTypes."""

    def test_common_types(self):
        mime = MimeTypes()
        assert mime.lookup("index.html") == "text/html"
        assert mime.lookup("site.css") == "text/css"
        assert mime.lookup("app.js") == "text/javascript"
        assert mime.lookup("movie.mp4") == "video/mp4"

    def test_case_insensitive(self):
        assert MimeTypes().lookup("Report.PDF") == "application/pdf"

    def test_last_extension_wins(self):
        assert MimeTypes().lookup("backup.tar.gz") == "application/gzip"

    def test_unknown_and_missing_extension(self):
        mime = MimeTypes()
        assert mime.lookup("blob.zzz") == DEFAULT_MIME_TYPE
        assert mime.lookup("Makefile") == DEFAULT_MIME_TYPE

    def test_no_charset_appended(self):
        assert ";" not in MimeTypes().lookup("a.txt")

    def test_overrides(self):
        mime = MimeTypes(overrides={"log": "text/plain", ".HTML": "application/xhtml+xml"})
        assert mime.lookup("server.log") == "text/plain"
        assert mime.lookup("page.html") == "application/xhtml+xml"
        assert ".log" in mime
        assert "log" in mime

    def test_custom_default(self):
        assert MimeTypes(default="text/plain").lookup("x.unknown") == "text/plain"

    def test_path_objects(self):
        assert MimeTypes().lookup(Path("/srv/www/logo.svg")) == "image/svg+xml"


class TestNormalizeExtension:
    def test_adds_dot_and_lowercases(self):
        assert normalize_extension("MP4") == ".mp4"
        assert normalize_extension(".Txt") == ".txt"

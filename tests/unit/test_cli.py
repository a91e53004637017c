"""
Unit tests for the command-line entry point.
"""

import pytest

from staticserve.__main__ import build_configs, build_parser, main


class TestCLI:
    """Tests for argument handling."""

    def test_defaults(self, monkeypatch):
        for name in ("STATIC_ROOT", "STATIC_URL_PREFIX", "HTTP_PORT"):
            monkeypatch.delenv(name, raising=False)

        config, static_config = build_configs(build_parser().parse_args([]))

        assert static_config.root == "."
        assert static_config.url_prefix == "/static"
        assert config.port == 8080

    def test_flags_override_environment(self, monkeypatch, root_dir):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("STATIC_URL_PREFIX", "/env")

        args = build_parser().parse_args([
            str(root_dir),
            "--port", "3000",
            "--prefix", "/",
            "--index", "index.html",
            "--workers", "2",
            "--log-level", "DEBUG",
            "--log-format", "json",
            "--mime", ".log=text/plain",
            "--mime", "mjs=text/javascript",
            "--hidden",
        ])
        config, static_config = build_configs(args)

        assert config.port == 3000
        assert config.max_workers == 2
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert static_config.root == str(root_dir)
        assert static_config.url_prefix == "/"
        assert static_config.index_file == "index.html"
        assert static_config.mime_overrides == {".log": "text/plain", ".mjs": "text/javascript"}
        assert static_config.serve_hidden_files is True

    def test_environment_used_without_flags(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("STATIC_SERVE_HIDDEN", "true")
        config, static_config = build_configs(build_parser().parse_args([]))
        assert config.port == 9000
        assert static_config.serve_hidden_files is True

    def test_bad_root_exits_with_error(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing")]) == 2
        assert "not a directory" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert "staticserve" in capsys.readouterr().out

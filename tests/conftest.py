"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
from pathlib import Path
from typing import Dict, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserve import HTTPServer, ServerConfig, StaticConfig, StaticFileHandler
from staticserve.files import ServeRoot


@pytest.fixture
def outside_dir(tmp_path: Path) -> Path:
    """A directory next to the serve root holding a secret."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("top secret")
    return outside


@pytest.fixture
def root_dir(tmp_path: Path, outside_dir: Path) -> Path:
    """
    Serve root layout:

        www/
            a.txt               "hello"
            empty.txt           ""
            page.html
            .env                hidden
            docs/
                index.html
                guide.txt
                deeper/         (no index)
            escape.txt   ->  ../outside/secret.txt
            link.txt     ->  a.txt
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "a.txt").write_text("hello")
    (root / "empty.txt").write_bytes(b"")
    (root / "page.html").write_text("<h1>hi</h1>")
    (root / ".env").write_text("SECRET=1")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<p>docs</p>")
    (docs / "guide.txt").write_text("read me")
    (docs / "deeper").mkdir()

    try:
        os.symlink(outside_dir / "secret.txt", root / "escape.txt")
        os.symlink(root / "a.txt", root / "link.txt")
    except (OSError, NotImplementedError):
        pass

    return root


@pytest.fixture
def serve_root(root_dir: Path) -> ServeRoot:
    return ServeRoot.from_path(root_dir)


@pytest.fixture
def requires_symlinks(root_dir: Path):
    if not (root_dir / "escape.txt").is_symlink():
        pytest.skip("symlinks not supported here")


@pytest.fixture
def static_config(root_dir: Path) -> StaticConfig:
    return StaticConfig(root=str(root_dir), url_prefix="/static")


@pytest.fixture
def handler(static_config: StaticConfig) -> StaticFileHandler:
    return StaticFileHandler(static_config)


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> "RawResponse":
        """Send one request with Connection: close and read to EOF."""
        lines = [f"{method} {path} HTTP/1.1", "Host: localhost", "Connection: close"]
        for name, value in (headers or {}).items():
            lines.append(f"{name}: {value}")
        data = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
        return RawResponse.parse(self.send_raw(data))

    @staticmethod
    def parse(data: bytes) -> "RawResponse":
        return RawResponse.parse(data)

    def send_raw(self, data: bytes) -> bytes:
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(data)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


class RawResponse:
    """Minimal parse of one HTTP response read off the wire."""

    def __init__(self, status: int, headers: Dict[str, str], body: bytes):
        self.status = status
        self.headers = headers
        self.body = body

    @classmethod
    def parse(cls, data: bytes) -> "RawResponse":
        head, _, body = data.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        status = int(lines[0].split(" ")[1])
        headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            headers[name.strip().lower()] = value.strip()
        return cls(status, headers, body)


@pytest.fixture
def live_server_factory():
    """
    Start real servers on free ports; all are stopped at teardown.

        live = live_server_factory(static_config, LoggingMiddleware())
    """
    started = []

    def factory(static_config: StaticConfig, *middleware) -> LiveServer:
        server = HTTPServer(ServerConfig(
            host="127.0.0.1",
            port=0,
            max_workers=4,
            timeout=5.0,
            keep_alive_timeout=1.0,
            log_level="WARNING",
        ))
        for mw in middleware:
            server.use(mw)
        server.mount_static(static_config)

        live = LiveServer(server)
        live.start()
        started.append(live)
        return live

    yield factory

    for live in started:
        live.stop()


@pytest.fixture
def live_server(live_server_factory, static_config: StaticConfig) -> LiveServer:
    """A real server serving the root_dir fixture at /static."""
    return live_server_factory(static_config)

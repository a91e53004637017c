"""
=============================================================================
FILE STREAMING
=============================================================================

Reads a byte window of a file in bounded chunks, so serving a 4 GB video
costs one chunk of memory per request, not 4 GB.

    FileWindow("/srv/www/movie.mp4", start=1_000_000, end=1_999_999)

        open()  ──►  seek(1_000_000)
        iter    ──►  read(64K) read(64K) ... read(16_960)   (exactly 1 MB)
        close() ──►  file handle released

The handle is released on EVERY exit path:

    - normal exhaustion of the iterator
    - an exception while reading
    - the consumer giving up early (client disconnect) and calling close()
    - leaving a `with FileWindow(...)` block

The window is based on the size the resolver saw. If the file shrinks
before we finish, reading stops with an OSError rather than sending fewer
bytes than the Content-Length promised.

=============================================================================
"""

import io
from typing import BinaryIO, Iterator, Optional


DEFAULT_CHUNK_SIZE = 64 * 1024


class FileWindow:
    """
    Iterable over the bytes [start, end] of a file.

    Usage:
        with FileWindow(path, 0, size - 1) as window:
            for chunk in window:
                sock.sendall(chunk)
    """

    def __init__(
        self,
        path: str,
        start: int,
        end: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if start < 0 or end < start:
            raise ValueError(f"Invalid window [{start}, {end}]")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        self.path = path
        self.start = start
        self.end = end
        self.chunk_size = chunk_size
        self._file: Optional[BinaryIO] = None
        self._sent = 0

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def bytes_sent(self) -> int:
        return self._sent

    @property
    def closed(self) -> bool:
        return self._file is None

    def open(self) -> "FileWindow":
        """
        Open the file and seek to the window start.

        Raises:
            OSError: If the file cannot be opened (permission, vanished).
        """
        if self._file is None:
            f = open(self.path, "rb", buffering=0)
            try:
                f.seek(self.start)
            except OSError:
                f.close()
                raise
            self._file = f
        return self

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    def __enter__(self) -> "FileWindow":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[bytes]:
        self.open()
        try:
            remaining = self.length - self._sent
            while remaining > 0:
                chunk = self._file.read(min(self.chunk_size, remaining))
                if not chunk:
                    raise OSError(
                        f"{self.path} shrank while streaming: "
                        f"{remaining} of {self.length} bytes missing"
                    )
                self._sent += len(chunk)
                remaining -= len(chunk)
                yield chunk
        finally:
            self.close()

    def read_all(self) -> bytes:
        """Collect the whole window. Meant for tests and small files."""
        buffer = io.BytesIO()
        for chunk in self:
            buffer.write(chunk)
        return buffer.getvalue()

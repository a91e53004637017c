"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: buffered request reading, response
writing (whole or streamed), keep-alive timeouts and a clean close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

    Client sends:            Server may receive:
        "GET /a HTTP/1.1"        recv() → "GET /a HT"
        "\\r\\n\\r\\n"               recv() → "TP/1.1\\r\\n\\r\\n"

So requests are buffered until the "\\r\\n\\r\\n" that ends the headers,
then Content-Length more bytes are read. Anything past the end of the
request stays in the buffer for the next keep-alive request.

=============================================================================
STREAMED WRITES
=============================================================================

A file body is written one chunk at a time with sendall(). sendall()
blocks while the client's receive window is full, so a slow client slows
down the worker instead of making the server buffer the whole file.

    send_stream(head, window)
        sendall(head)
        for chunk in window:        ← may raise OSError (file problem)
            sendall(chunk)          ← returns False (client problem)

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


logger = logging.getLogger(__name__)


class RequestTooLarge(ValueError):
    """The client sent more than max_request_size bytes for one request."""


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current lifecycle state.
        requests_handled: Requests read on this connection so far.
        bytes_sent: Response bytes written so far.
    """

    socket: socket.socket
    address: tuple
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0
    bytes_sent: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0           # first request
    keep_alive_timeout: float = 5.0           # subsequent requests
    max_request_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request.

        Returns:
            The request bytes, or None if the client closed the connection
            (or an idle keep-alive connection timed out).

        Raises:
            TimeoutError: The first request did not arrive in time.
            RequestTooLarge: The request exceeds max_request_size.
        """
        self.state = ConnectionState.READING
        self.last_activity = time.time()

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._append(chunk)

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break
                self._append(chunk)

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            self.last_activity = time.time()
            return request_data

        except socket.timeout:
            if self.requests_handled > 0 and not self._buffer:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _append(self, chunk: bytes) -> None:
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(self._buffer)} bytes")

    def _recv(self) -> bytes:
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in the raw header block.

        Invalid values count as 0 here; the request parser rejects them
        properly with a 400.
        """
        for line in headers.decode("latin-1").lower().split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    def send_response(self, data: bytes) -> bool:
        """
        Send bytes with sendall().

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.debug(f"[{self.id}] Send failed: {e}")
            return False
        self.bytes_sent += len(data)
        self.last_activity = time.time()
        return True

    def send_stream(self, head: bytes, chunks: Iterable[bytes]) -> bool:
        """
        Send a response head followed by a streamed body.

        Returns False as soon as the client stops accepting data. Errors
        raised while producing chunks (a file that vanished or shrank)
        propagate to the caller, which must drop the connection: the
        Content-Length already sent can no longer be honored.
        """
        if not self.send_response(head):
            return False
        for chunk in chunks:
            if not self.send_response(chunk):
                return False
        return True

    def set_keep_alive(self) -> None:
        self.state = ConnectionState.KEEP_ALIVE

    def close(self) -> None:
        """
        Close gracefully: shutdown(SHUT_WR), drain briefly, close.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.requests_handled} requests, "
            f"{self.bytes_sent} bytes sent"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

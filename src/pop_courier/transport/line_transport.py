"""Buffered line I/O over a plain or TLS socket.

The transport delivers exactly one logical line per read with the
terminator stripped, and writes whole command lines with a flush. It
knows nothing about POP3 status markers.
"""

import socket
import ssl
from typing import BinaryIO

import structlog

from pop_courier.exceptions import (
    ConnectionClosedError,
    ProtocolError,
    TransportError,
)

logger = structlog.get_logger(__name__)

CR = b"\r"
LF = b"\n"
CRLF = CR + LF

DEFAULT_MAX_LINE_LENGTH = 8192


class LineTransport:
    """Line-oriented wrapper around a buffered binary duplex stream.

    Attributes:
        max_line_length: Longest accepted line including its terminator.
    """

    def __init__(
        self,
        stream: BinaryIO,
        sock: socket.socket | None = None,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        """Initialize the transport.

        Args:
            stream: Buffered stream providing readline, write, flush and close.
            sock: Socket backing the stream, closed together with it.
            max_line_length: Longest accepted line including its terminator.
        """
        self._stream = stream
        self._sock = sock
        self.max_line_length = max_line_length
        self._closed = False

    @classmethod
    def from_socket(
        cls, sock: socket.socket, max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    ) -> "LineTransport":
        return cls(sock.makefile("rwb"), sock=sock, max_line_length=max_line_length)

    @property
    def closed(self) -> bool:
        return self._closed

    def read_line(self) -> bytes:
        """Read one line and strip its terminator.

        Servers may send CRLF, bare LF or CR...LF; readline() splits on
        LF so only those three shapes can occur.

        Raises:
            ConnectionClosedError: The peer closed the stream.
            TransportError: The read failed.
            ProtocolError: The line exceeds max_line_length.
        """
        if self._closed:
            raise ConnectionClosedError("Transport is closed")
        try:
            line = self._stream.readline(self.max_line_length + 1)
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

        if not line:
            raise ConnectionClosedError("Server closed the connection")
        if len(line) > self.max_line_length:
            raise ProtocolError(f"Line exceeds {self.max_line_length} octets")

        if line[-1:] != LF:
            raise ConnectionClosedError("Server closed the connection mid-line")
        if line[-2:] == CRLF:
            return line[:-2]
        if line[:1] == CR:
            return line[1:-1]
        return line[:-1]

    def write_and_flush(self, data: bytes) -> None:
        """Write raw bytes and flush them to the peer.

        Raises:
            ConnectionClosedError: The transport was already closed.
            TransportError: The write or flush failed.
        """
        if self._closed:
            raise ConnectionClosedError("Transport is closed")
        try:
            self._stream.write(data)
            self._stream.flush()
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    def close(self) -> None:
        """Close the stream and socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except OSError as e:
            logger.warning("pop3_stream_close_failed", error=str(e))
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.warning("pop3_socket_close_failed", error=str(e))


def open_connection(
    host: str,
    port: int,
    *,
    use_tls: bool = False,
    timeout: float | None = None,
    ssl_context: ssl.SSLContext | None = None,
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> LineTransport:
    """Connect to host:port, negotiating TLS first when requested.

    Args:
        host: Server hostname or address.
        port: Server port.
        use_tls: Wrap the socket in TLS before any protocol traffic.
        timeout: Socket timeout in seconds; None blocks indefinitely.
        ssl_context: Context to use instead of ssl.create_default_context().
        max_line_length: Passed through to the LineTransport.

    Raises:
        TransportError: The TCP connect or TLS negotiation failed.
    """
    logger.info("pop3_connecting", host=host, port=port, tls=use_tls)
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as e:
        logger.error("pop3_connect_failed", host=host, port=port, error=str(e))
        raise TransportError(f"Connection to {host}:{port} failed: {e}") from e

    if use_tls:
        context = ssl_context or ssl.create_default_context()
        try:
            sock = context.wrap_socket(sock, server_hostname=host)
        except OSError as e:
            sock.close()
            logger.error("pop3_tls_failed", host=host, port=port, error=str(e))
            raise TransportError(f"TLS negotiation with {host}:{port} failed: {e}") from e

    return LineTransport.from_socket(sock, max_line_length=max_line_length)

"""Message decoding collaborator.

The protocol engine reads the multi-line body itself and hands each
content line to a decoder; the decoder never touches the stream, so it
cannot consume or miss the end-of-body sentinel.
"""

from collections.abc import Callable
from email import policy
from email.parser import BytesFeedParser
from typing import Any, Protocol

from pop_courier.models import RetrievedMessage

CRLF = b"\r\n"


class MessageDecoder(Protocol):
    """Incremental consumer of one message body."""

    def feed(self, line: bytes) -> None:
        """Accept one body line, terminator already stripped."""
        ...

    def close(self) -> Any:
        """Finish decoding and return the message representation."""
        ...


DecoderFactory = Callable[[], MessageDecoder]


class EmailDecoder:
    """Decode a body into a RetrievedMessage using the stdlib email parser."""

    def __init__(self) -> None:
        self._parser = BytesFeedParser(policy=policy.default)
        self._raw = bytearray()

    def feed(self, line: bytes) -> None:
        data = line + CRLF
        self._raw += data
        self._parser.feed(data)

    def close(self) -> RetrievedMessage:
        msg = self._parser.close()
        return RetrievedMessage.from_message(msg, bytes(self._raw))


class RawDecoder:
    """Collect the body as bytes without interpreting it."""

    def __init__(self) -> None:
        self._lines: list[bytes] = []

    def feed(self, line: bytes) -> None:
        self._lines.append(line)

    def close(self) -> bytes:
        return b"".join(line + CRLF for line in self._lines)

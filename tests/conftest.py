"""Pytest configuration and fixtures."""

import io
import os

import pytest
from structlog.testing import capture_logs

# Set test environment variables before importing settings
os.environ.update(
    {
        "POP3_HOST": "pop.test.local",
        "POP3_USER": "alice",
        "POP3_PASSWORD": "secret",
    }
)

CRLF = b"\r\n"


@pytest.fixture(autouse=True)
def captured_logs():
    """Route structlog events into a list instead of stdout."""
    with capture_logs() as logs:
        yield logs


class ScriptedStream:
    """Duplex stream replaying fixed server bytes and recording writes."""

    def __init__(self, incoming: bytes) -> None:
        self._in = io.BytesIO(incoming)
        self.written = bytearray()
        self.closed = False

    def readline(self, limit: int = -1) -> bytes:
        return self._in.readline(limit)

    def write(self, data: bytes) -> int:
        self.written += data
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    @property
    def commands(self) -> list[str]:
        """Command lines written so far, without terminators."""
        return self.written.decode().split("\r\n")[:-1]

    @property
    def unread(self) -> bytes:
        return self._in.read()


class FakePOP3Server:
    """In-memory POP3 server speaking over the stream interface.

    Tracks deletion marks per session, honours RSET and only expunges
    on QUIT. With defer_auth a bad password is accepted and the next
    command is refused instead.
    """

    def __init__(
        self,
        messages: list[bytes],
        user: str = "alice",
        password: str = "secret",
        defer_auth: bool = False,
        greeting: str = "+OK ready",
    ) -> None:
        self.messages = list(messages)
        self.uids = [f"uid-{n:04d}" for n in range(1, len(messages) + 1)]
        self.deleted: set[int] = set()
        self.user = user
        self.password = password
        self.defer_auth = defer_auth
        self.received: list[str] = []
        self.quit_received = False
        self.closed = False
        self._given_user: str | None = None
        self._auth_failed = False
        self._out = bytearray()
        self._pending = bytearray()
        self._reply(greeting)

    # stream interface

    def readline(self, limit: int = -1) -> bytes:
        end = self._out.find(b"\n")
        end = len(self._out) if end < 0 else end + 1
        if limit is not None and limit >= 0:
            end = min(end, limit)
        line = bytes(self._out[:end])
        del self._out[:end]
        return line

    def write(self, data: bytes) -> int:
        self._pending += data
        return len(data)

    def flush(self) -> None:
        while CRLF in self._pending:
            line, _, rest = bytes(self._pending).partition(CRLF)
            self._pending = bytearray(rest)
            self._handle(line.decode())

    def close(self) -> None:
        self.closed = True

    # server side

    def _reply(self, line: str) -> None:
        self._out += line.encode() + CRLF

    def _send_body(self, lines: list[bytes]) -> None:
        for line in lines:
            if line.startswith(b"."):
                line = b"." + line
            self._out += line + CRLF
        self._out += b"." + CRLF

    @staticmethod
    def _lines(message: bytes) -> list[bytes]:
        lines = message.split(CRLF)
        if lines and lines[-1] == b"":
            lines.pop()
        return lines

    def _lookup(self, arg: str) -> int | None:
        if not arg.isdigit():
            return None
        index = int(arg) - 1
        if index < 0 or index >= len(self.messages) or index in self.deleted:
            return None
        return index

    def _visible(self) -> list[int]:
        return [i for i in range(len(self.messages)) if i not in self.deleted]

    def _handle(self, line: str) -> None:
        self.received.append(line)
        verb, *args = line.split(" ")
        verb = verb.upper()

        if verb == "QUIT":
            self.quit_received = True
            self.messages = [m for i, m in enumerate(self.messages) if i not in self.deleted]
            self.deleted.clear()
            self._reply("+OK bye")
            return
        if verb == "USER":
            self._given_user = args[0] if args else None
            self._reply("+OK send password")
            return
        if verb == "PASS":
            ok = self._given_user == self.user and args == [self.password]
            if ok:
                self._reply(f"+OK {len(self.messages)} messages")
            elif self.defer_auth:
                self._auth_failed = True
                self._reply("+OK")
            else:
                self._reply("-ERR invalid password")
            return
        if self._auth_failed:
            self._reply("-ERR authentication failed")
            return

        if verb == "NOOP":
            self._reply("+OK")
        elif verb == "RSET":
            self.deleted.clear()
            self._reply(f"+OK maildrop has {len(self.messages)} messages")
        elif verb == "STAT":
            visible = self._visible()
            size = sum(len(self.messages[i]) for i in visible)
            self._reply(f"+OK {len(visible)} {size}")
        elif verb in ("LIST", "UIDL") and not args:
            self._reply("+OK")
            if verb == "LIST":
                body = [f"{i + 1} {len(self.messages[i])}".encode() for i in self._visible()]
            else:
                body = [f"{i + 1} {self.uids[i]}".encode() for i in self._visible()]
            self._send_body(body)
        elif verb in ("LIST", "UIDL", "RETR", "DELE", "TOP"):
            index = self._lookup(args[0])
            if index is None:
                self._reply("-ERR no such message")
            elif verb == "LIST":
                self._reply(f"+OK {index + 1} {len(self.messages[index])}")
            elif verb == "UIDL":
                self._reply(f"+OK {index + 1} {self.uids[index]}")
            elif verb == "DELE":
                self.deleted.add(index)
                self._reply(f"+OK message {index + 1} deleted")
            elif verb == "RETR":
                self._reply(f"+OK {len(self.messages[index])} octets")
                self._send_body(self._lines(self.messages[index]))
            else:
                lines = self._lines(self.messages[index])
                split = lines.index(b"") if b"" in lines else len(lines)
                count = int(args[1])
                self._reply("+OK")
                self._send_body(lines[: split + 1 + count])
        else:
            self._reply("-ERR unknown command")


@pytest.fixture
def scripted():
    """Build a POP3Client over a ScriptedStream.

    The greeting ``+OK ready`` is prepended to the given server lines.
    Returns (client, stream).
    """
    from pop_courier.client import POP3Client
    from pop_courier.transport import LineTransport

    def _make(*lines: str, greeting: str = "+OK ready", **client_kwargs):
        data = b"".join(line.encode() + CRLF for line in (greeting, *lines))
        stream = ScriptedStream(data)
        client = POP3Client.open(LineTransport(stream), **client_kwargs)
        return client, stream

    return _make


@pytest.fixture
def sample_email_bytes():
    """Sample raw email bytes."""
    return (
        b"From: Sender <sender@example.com>\r\n"
        b"To: recipient@test.local\r\n"
        b"Subject: Test Email\r\n"
        b"Message-ID: <test-123@example.com>\r\n"
        b"Content-Type: text/plain\r\n"
        b"\r\n"
        b"This is a test email body.\r\n"
        b".signature line starting with a dot\r\n"
        b"Second line.\r\n"
    )


@pytest.fixture
def second_email_bytes():
    return (
        b"From: other@example.com\r\n"
        b"To: recipient@test.local\r\n"
        b"Subject: Another\r\n"
        b"\r\n"
        b"Short.\r\n"
    )


@pytest.fixture
def fake_server(sample_email_bytes, second_email_bytes):
    return FakePOP3Server([sample_email_bytes, second_email_bytes])


@pytest.fixture
def server_client(fake_server):
    """POP3Client connected to fake_server, not yet authenticated."""
    from pop_courier.client import POP3Client
    from pop_courier.transport import LineTransport

    return POP3Client.open(LineTransport(fake_server))


@pytest.fixture
def server_factory():
    """Build (FakePOP3Server, POP3Client) pairs with custom server options."""
    from pop_courier.client import POP3Client
    from pop_courier.transport import LineTransport

    def _make(messages: list[bytes], **server_kwargs):
        server = FakePOP3Server(messages, **server_kwargs)
        return server, POP3Client.open(LineTransport(server))

    return _make

"""Synchronous POP3 client.

One POP3Client owns one LineTransport and runs strictly one command at a
time: send a request line, read the status line, and for listing and
retrieval verbs drain the dot-terminated body before returning. Nothing
is cached, retried or pipelined. Any exception leaves the session in an
unknown state and the caller should close it and reconnect.
"""

from __future__ import annotations

import ssl
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

from pop_courier.config import POP3_PORT, POP3_TLS_PORT
from pop_courier.core import sanitize_for_log
from pop_courier.decoder import DecoderFactory, EmailDecoder
from pop_courier.exceptions import (
    AuthenticationError,
    ConnectionClosedError,
    ProtocolError,
)
from pop_courier.models import MailboxStat, MessageSummary, MessageUid
from pop_courier.protocol import Command, Reply, iter_body, parse_reply, parse_uint, read_body
from pop_courier.protocol.reply import decode_line, get_field
from pop_courier.transport import LineTransport, open_connection

if TYPE_CHECKING:
    from pop_courier.config import Settings

logger = structlog.get_logger(__name__)

CRLF = b"\r\n"


def _parse_summary(fields: list[str], line: str) -> MessageSummary:
    msg_id = parse_uint(get_field(fields, 0, line), line)
    size = parse_uint(get_field(fields, 1, line), line)
    return MessageSummary(id=msg_id, size=size)


def _parse_uid(fields: list[str], line: str) -> MessageUid:
    msg_id = parse_uint(get_field(fields, 0, line), line)
    uid = get_field(fields, 1, line)
    return MessageUid(id=msg_id, uid=uid)


class POP3Client:
    """A POP3 session over an established LineTransport.

    Build one with POP3Client.open() (or dial/dial_tls/connect), which
    performs the greeting handshake. Reply fields are counted after the
    status marker, so for ``+OK 2 320`` fields[0] is ``2``.

    Attributes:
        greeting: Text of the server greeting after ``+OK``.
        dot_unstuffing: Strip the stuffed leading dot from body lines.
        decoder_factory: Builds the decoder used by retrieve() and top().
    """

    def __init__(
        self,
        transport: LineTransport,
        *,
        dot_unstuffing: bool = True,
        decoder_factory: DecoderFactory = EmailDecoder,
    ) -> None:
        self._transport = transport
        self.dot_unstuffing = dot_unstuffing
        self.decoder_factory = decoder_factory
        self.greeting: str | None = None

    @classmethod
    def open(cls, transport: LineTransport, **kwargs: Any) -> "POP3Client":
        """Create a session by reading and validating the server greeting.

        Raises:
            ProtocolError: The greeting is missing or not positive. The
                transport is closed.
            TransportError: Reading the greeting failed.
        """
        client = cls(transport, **kwargs)
        client._handshake()
        return client

    def _handshake(self) -> None:
        try:
            line = self.read_line()
            reply = parse_reply(line)
        except ProtocolError as e:
            self.close()
            raise ProtocolError("Server did not greet positively", reply=e.reply) from e
        except Exception:
            self.close()
            raise

        if not reply.positive:
            self.close()
            logger.error("pop3_greeting_rejected", reply=sanitize_for_log(reply.text))
            raise ProtocolError("Server did not greet positively", reply=reply.text)

        self.greeting = reply.text
        logger.info("pop3_session_opened", greeting=sanitize_for_log(reply.text))

    @property
    def is_connected(self) -> bool:
        """True until quit(), close() or the server hangs up."""
        return not self._transport.closed

    # Engine primitives

    def read_line(self) -> bytes:
        """Read one line from the server, terminator stripped.

        A server hang-up closes the session before the error propagates.
        """
        try:
            line = self._transport.read_line()
        except ConnectionClosedError:
            self._transport.close()
            raise
        logger.debug("pop3_line_received", line=sanitize_for_log(line))
        return line

    def read_lines(self) -> list[bytes]:
        """Read a multi-line body up to, and excluding, the sentinel."""
        return read_body(self.read_line, dot_unstuffing=self.dot_unstuffing)

    def send(self, command: Command, *args: object) -> None:
        """Write one command line and flush it, without reading a reply."""
        if not self.is_connected:
            raise ConnectionClosedError("Session is closed")
        line = command.format(*args)
        logger.debug("pop3_command", command=command.loggable(*args))
        self._transport.write_and_flush(line.encode("utf-8") + CRLF)

    def execute(self, command: Command, *args: object) -> Reply:
        """Send a command and return its positive status line.

        Raises:
            ProtocolError: The server replied -ERR (reason in ``reply``) or
                sent an unrecognized status line.
            TransportError: The exchange failed at the stream level.
        """
        self.send(command, *args)
        reply = parse_reply(self.read_line())
        if not reply.positive:
            logger.warning(
                "pop3_negative_reply",
                command=command.value,
                reply=sanitize_for_log(reply.text),
            )
            raise ProtocolError(f"{command.value} failed: {reply.text}", reply=reply.text)
        return reply

    def _decode_body(self) -> Any:
        decoder = self.decoder_factory()
        for line in iter_body(self.read_line, dot_unstuffing=self.dot_unstuffing):
            decoder.feed(line)
        return decoder.close()

    # Authorization

    def user(self, name: str) -> Reply:
        """Send the mailbox name (USER)."""
        return self.execute(Command.USER, name)

    def pass_(self, password: str) -> Reply:
        """Send the password (PASS).

        NB: the server locks the maildrop from here until quit().
        """
        return self.execute(Command.PASS, password)

    def authenticate(self, user: str, password: str) -> None:
        """Log in with USER/PASS, then check the login with NOOP.

        Some servers accept both lines and only report a bad login on
        the next command, so the NOOP rejection counts as an auth failure.

        Raises:
            AuthenticationError: Any of the three commands was rejected.
        """
        try:
            self.user(user)
            self.pass_(password)
            self.noop()
        except ProtocolError as e:
            logger.warning("pop3_auth_failed", user=user, reply=sanitize_for_log(e.reply or ""))
            raise AuthenticationError(f"Authentication failed for {user}", reply=e.reply) from e
        logger.info("pop3_authenticated", user=user)

    # Transaction

    def stat(self) -> MailboxStat:
        """Return message count and total size of the maildrop."""
        reply = self.execute(Command.STAT)
        count = parse_uint(get_field(reply.fields, 0, reply.raw), reply.raw)
        total_size = parse_uint(get_field(reply.fields, 1, reply.raw), reply.raw)
        return MailboxStat(count=count, total_size=total_size)

    def list(self, msg_id: int) -> MessageSummary:
        """Return the scan listing of one message."""
        reply = self.execute(Command.LIST, msg_id)
        return _parse_summary(reply.fields, reply.raw)

    def list_all(self) -> list[MessageSummary]:
        """Return scan listings for every message, in server order.

        The whole body is read before parsing; one malformed line fails
        the call and no partial list is returned.
        """
        self.execute(Command.LIST)
        summaries = []
        for raw in self.read_lines():
            line = decode_line(raw)
            summaries.append(_parse_summary(line.split(), line))
        return summaries

    def retrieve(self, msg_id: int) -> Any:
        """Download a message and return what the decoder builds from it.

        With the default decoder this is a RetrievedMessage.
        """
        self.execute(Command.RETR, msg_id)
        message = self._decode_body()
        logger.info("pop3_message_retrieved", msg_id=msg_id)
        return message

    def top(self, msg_id: int, lines: int) -> Any:
        """Fetch the headers and the first ``lines`` body lines of a message."""
        if lines < 0:
            raise ValueError("lines must be non-negative")
        self.execute(Command.TOP, msg_id, lines)
        return self._decode_body()

    def delete(self, msg_id: int) -> None:
        """Mark a message deleted. Applied at quit(), undone by reset()."""
        self.execute(Command.DELE, msg_id)
        logger.info("pop3_message_marked_deleted", msg_id=msg_id)

    def noop(self) -> None:
        self.execute(Command.NOOP)

    def reset(self) -> None:
        """Unmark every message marked deleted in this session."""
        self.execute(Command.RSET)

    def uid_list(self, msg_id: int) -> MessageUid:
        """Return the unique-id listing of one message."""
        reply = self.execute(Command.UIDL, msg_id)
        return _parse_uid(reply.fields, reply.raw)

    def uid_list_all(self) -> list[MessageUid]:
        """Return unique-id listings for every message, in server order."""
        self.execute(Command.UIDL)
        uids = []
        for raw in self.read_lines():
            line = decode_line(raw)
            uids.append(_parse_uid(line.split(), line))
        return uids

    # Teardown

    def quit(self) -> None:
        """Send QUIT and close the connection without waiting for the reply.

        The server commits pending deletions when it processes QUIT.
        """
        try:
            self.send(Command.QUIT)
        finally:
            self.close()
        logger.info("pop3_session_closed")

    def close(self) -> None:
        """Drop the connection without QUIT; pending deletions are discarded."""
        self._transport.close()

    def __enter__(self) -> "POP3Client":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not self.is_connected:
            return
        if exc_type is None:
            self.quit()
        else:
            self.close()


def dial(
    host: str, port: int = POP3_PORT, *, timeout: float | None = None, **kwargs: Any
) -> POP3Client:
    """Connect over plain TCP and perform the greeting handshake."""
    return POP3Client.open(open_connection(host, port, timeout=timeout), **kwargs)


def dial_tls(
    host: str,
    port: int = POP3_TLS_PORT,
    *,
    timeout: float | None = None,
    ssl_context: ssl.SSLContext | None = None,
    **kwargs: Any,
) -> POP3Client:
    """Connect over TLS and perform the greeting handshake."""
    transport = open_connection(
        host, port, use_tls=True, timeout=timeout, ssl_context=ssl_context
    )
    return POP3Client.open(transport, **kwargs)


def connect(settings: "Settings", *, login: bool = True) -> POP3Client:
    """Open a session as described by settings and, by default, log in.

    On a failed login the connection is closed before the error propagates.
    """
    transport = open_connection(
        settings.host,
        settings.effective_port,
        use_tls=settings.use_tls,
        timeout=settings.timeout,
        max_line_length=settings.max_line_length,
    )
    client = POP3Client.open(transport, dot_unstuffing=settings.dot_unstuffing)
    if login:
        try:
            client.authenticate(settings.user, settings.password.get_secret_value())
        except Exception:
            client.close()
            raise
    return client

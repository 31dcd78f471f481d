"""
pop-courier
===========

Synchronous POP3 client: session handshake, command/reply engine,
dot-terminated body reader and the typed command set.
"""

__version__ = "0.1.0"

from pop_courier.client import POP3Client, connect, dial, dial_tls
from pop_courier.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionClosedError,
    ParseError,
    PopCourierError,
    ProtocolError,
    TransportError,
)
from pop_courier.models import MailboxStat, MessageSummary, MessageUid, RetrievedMessage

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionClosedError",
    "MailboxStat",
    "MessageSummary",
    "MessageUid",
    "POP3Client",
    "ParseError",
    "PopCourierError",
    "ProtocolError",
    "RetrievedMessage",
    "TransportError",
    "connect",
    "dial",
    "dial_tls",
]

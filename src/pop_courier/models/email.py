"""Email data models for pop-courier.

This module provides the message representation produced when a
retrieved or partially retrieved message body is decoded.
"""

from dataclasses import dataclass
from email.errors import HeaderParseError
from email.header import decode_header
from email.message import Message
from email.utils import parseaddr

BODY_PREVIEW_LENGTH = 800


def _decode_header(val: object) -> str:
    """Decode RFC 2047 encoded words, always returning plain str."""
    if val is None:
        return ""
    try:
        parts = decode_header(str(val))
        decoded = []
        for fragment, charset in parts:
            if isinstance(fragment, bytes):
                decoded.append(fragment.decode(charset or "utf-8", errors="replace"))
            else:
                decoded.append(fragment)
        return "".join(decoded)
    except (HeaderParseError, LookupError, ValueError):
        return str(val)


def _body_preview(msg: Message) -> str:
    payload: object = None
    if msg.is_multipart():
        for part in msg.walk():
            if part.get_content_type() == "text/plain":
                payload = part.get_payload(decode=True)
                break
    else:
        payload = msg.get_payload(decode=True)
    if not isinstance(payload, bytes):
        return ""
    body = payload.decode("utf-8", errors="ignore")[:BODY_PREVIEW_LENGTH]
    return body.replace("\r", "").replace("\n", " ").strip()


@dataclass
class RetrievedMessage:
    """A message fetched with RETR or TOP.

    Attributes:
        message_id: The Message-ID header value.
        from_addr: The From header value.
        to_addr: The To header value.
        reply_to: The Reply-To header value (may be None).
        subject: The Subject header value.
        body_preview: First 800 characters of the text body.
        raw: The message as received, CRLF line endings, no sentinel.
        message: The parsed message object.
    """

    message_id: str
    from_addr: str
    to_addr: str
    reply_to: str | None
    subject: str
    body_preview: str
    raw: bytes
    message: Message

    def get_sender_address(self) -> str:
        """Extract the bare email address from the From header.

        Handles "Name <a@b>", "<a@b>" and "a@b".
        """
        _, address = parseaddr(self.from_addr)
        return address if address else self.from_addr

    @classmethod
    def from_message(cls, msg: Message, raw: bytes) -> "RetrievedMessage":
        reply_to_raw = msg.get("Reply-To")
        return cls(
            message_id=_decode_header(msg.get("Message-ID")),
            from_addr=_decode_header(msg.get("From")),
            to_addr=_decode_header(msg.get("To")),
            reply_to=_decode_header(reply_to_raw) if reply_to_raw else None,
            subject=_decode_header(msg.get("Subject")),
            body_preview=_body_preview(msg),
            raw=raw,
            message=msg,
        )

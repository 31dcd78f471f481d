"""Status line classification and positional field parsing."""

import re
from dataclasses import dataclass, field

from pop_courier.exceptions import ParseError, ProtocolError

OK = "+OK"
ERR = "-ERR"

_UINT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Reply:
    """One classified status line.

    Attributes:
        positive: True for +OK, False for -ERR.
        text: Everything after the marker, leading whitespace removed.
        raw: The full line as decoded.
        fields: ``text`` split on whitespace.
    """

    positive: bool
    text: str
    raw: str
    fields: list[str] = field(default_factory=list)


def decode_line(line: bytes) -> str:
    return line.decode("utf-8", errors="replace")


def parse_reply(line: bytes) -> Reply:
    """Classify a status line as positive or negative.

    The marker must be the whole line or be followed by whitespace, so
    ``+OKAY`` is not a positive reply.

    Raises:
        ProtocolError: The line starts with neither +OK nor -ERR.
    """
    raw = decode_line(line)
    for marker, positive in ((OK, True), (ERR, False)):
        rest = raw[len(marker) :]
        if raw[: len(marker)].upper() == marker and (not rest or rest[0].isspace()):
            text = rest.strip()
            return Reply(positive=positive, text=text, raw=raw, fields=text.split())
    raise ProtocolError(f"Unrecognized status line: {raw!r}", reply=raw)


def parse_uint(value: str, line: str) -> int:
    """Parse a base-10 non-negative integer field.

    Raises:
        ParseError: The value has anything other than ASCII digits.
    """
    if not _UINT_RE.fullmatch(value):
        raise ParseError(f"Expected a non-negative integer, got {value!r}", line=line)
    return int(value)


def get_field(fields: list[str], index: int, line: str) -> str:
    """Return fields[index] or raise ParseError if the line is too short."""
    if index >= len(fields):
        raise ParseError(f"Missing field {index} in {line!r}", line=line)
    return fields[index]

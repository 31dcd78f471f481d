"""Value types for mailbox metadata returned by the command set."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageSummary:
    """One scan listing entry: ordinal message number and size in octets.

    Ordinal ids are server-assigned, 1-based and only valid for the
    current session.
    """

    id: int
    size: int


@dataclass(frozen=True)
class MessageUid:
    """One unique-id listing entry.

    ``uid`` is opaque and stays stable across sessions, unlike ``id``.
    """

    id: int
    uid: str


@dataclass(frozen=True)
class MailboxStat:
    """Drop listing for the whole maildrop. Never cached."""

    count: int
    total_size: int

"""POP3 command keywords and request line formatting."""

from enum import Enum


class Command(str, Enum):
    """Closed set of verbs the client sends, always uppercase on the wire."""

    USER = "USER"
    PASS = "PASS"
    STAT = "STAT"
    LIST = "LIST"
    RETR = "RETR"
    DELE = "DELE"
    NOOP = "NOOP"
    RSET = "RSET"
    TOP = "TOP"
    UIDL = "UIDL"
    QUIT = "QUIT"

    def format(self, *args: object) -> str:
        """Render ``VERB[ arg1[ arg2]]`` without the line terminator.

        Raises:
            ValueError: An argument contains CR or LF, which would inject
                a second command onto the wire.
        """
        parts = [self.value]
        for arg in args:
            text = str(arg)
            if "\r" in text or "\n" in text:
                raise ValueError(f"{self.value} argument contains a line break")
            parts.append(text)
        return " ".join(parts)

    def loggable(self, *args: object) -> str:
        """Like format() but with the PASS secret masked."""
        if self is Command.PASS:
            return f"{self.value} ****"
        return self.format(*args)

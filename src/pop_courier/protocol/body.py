"""Reader for dot-terminated multi-line bodies."""

from collections.abc import Callable, Iterator

SENTINEL = b"."


def iter_body(read_line: Callable[[], bytes], dot_unstuffing: bool = True) -> Iterator[bytes]:
    """Yield body lines until the sentinel line, which is consumed, not yielded.

    With dot_unstuffing a leading ``..`` loses one dot (RFC 1939 3).
    Without it a content line the server sent as ``..`` comes back as
    is, and a content line that is exactly ``.`` ends the body early.

    Errors from read_line propagate unchanged.
    """
    while True:
        line = read_line()
        if line == SENTINEL:
            return
        if dot_unstuffing and line.startswith(b".."):
            line = line[1:]
        yield line


def read_body(read_line: Callable[[], bytes], dot_unstuffing: bool = True) -> list[bytes]:
    return list(iter_body(read_line, dot_unstuffing=dot_unstuffing))

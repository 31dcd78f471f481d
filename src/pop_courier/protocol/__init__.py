"""Wire-level pieces of the POP3 engine: verbs, status lines and bodies."""

from pop_courier.protocol.body import SENTINEL, iter_body, read_body
from pop_courier.protocol.commands import Command
from pop_courier.protocol.reply import Reply, parse_reply, parse_uint

__all__ = ["SENTINEL", "Command", "Reply", "iter_body", "parse_reply", "parse_uint", "read_body"]

from pop_courier.models.email import RetrievedMessage
from pop_courier.models.mailbox import MailboxStat, MessageSummary, MessageUid

__all__ = ["MailboxStat", "MessageSummary", "MessageUid", "RetrievedMessage"]

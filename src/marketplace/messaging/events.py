"""Domain events for the Message aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Message")
class MessageSent:
    """A message was delivered into a conversation."""

    __version__ = 1

    message_id = Identifier(required=True)
    conversation_id = String(required=True)
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    is_automated = Boolean(default=False)
    sent_at = DateTime(required=True)

"""Message aggregate: one message between two marketplace users.

Both participants of a pair share one conversation id, built from their two
ids so it is the same whichever of them sends.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.messaging.events import MessageSent


def conversation_id_for(first_user_id, second_user_id):
    return "_".join(sorted([str(first_user_id), str(second_user_id)]))


@marketplace.aggregate
class Message:
    conversation_id = String(required=True, max_length=255)
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    body = Text(required=True)
    product_id = Identifier()
    is_read = Boolean(default=False)
    is_automated = Boolean(default=False)
    sent_at = DateTime()
    read_at = DateTime()

    @classmethod
    def send(cls, sender_id, receiver_id, body, product_id=None, is_automated=False):
        if not body or not body.strip():
            raise ValidationError({"body": ["Receiver and message are required"]})
        if str(sender_id) == str(receiver_id):
            raise ValidationError({"receiver_id": ["Cannot send a message to yourself"]})

        now = datetime.now(UTC)
        message = cls(
            conversation_id=conversation_id_for(sender_id, receiver_id),
            sender_id=sender_id,
            receiver_id=receiver_id,
            body=body,
            product_id=product_id,
            is_read=False,
            is_automated=is_automated,
            sent_at=now,
        )
        message.raise_(
            MessageSent(
                message_id=str(message.id),
                conversation_id=message.conversation_id,
                sender_id=str(sender_id),
                receiver_id=str(receiver_id),
                is_automated=is_automated,
                sent_at=now,
            )
        )
        return message

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.now(UTC)

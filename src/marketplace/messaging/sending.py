"""Sending and reading messages: commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.messaging.message import Message


@marketplace.command(part_of="Message")
class SendMessage:
    sender_id: Identifier(required=True)
    receiver_id: Identifier(required=True)
    body: Text(required=True)
    product_id: Identifier()


@marketplace.command(part_of="Message")
class SendAutomatedMessage:
    seller_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    body: Text(required=True)


@marketplace.command(part_of="Message")
class MarkConversationRead:
    reader_id: Identifier(required=True)
    conversation_id: String(required=True, max_length=255)


@marketplace.command_handler(part_of=Message)
class MessagingHandler:
    @handle(SendMessage)
    def send_message(self, command):
        message = Message.send(
            sender_id=command.sender_id,
            receiver_id=command.receiver_id,
            body=command.body,
            product_id=command.product_id,
        )
        current_domain.repository_for(Message).add(message)
        return str(message.id)

    @handle(SendAutomatedMessage)
    def send_automated_message(self, command):
        message = Message.send(
            sender_id=command.seller_id,
            receiver_id=command.buyer_id,
            body=command.body,
            is_automated=True,
        )
        current_domain.repository_for(Message).add(message)
        return str(message.id)

    @handle(MarkConversationRead)
    def mark_conversation_read(self, command):
        """Mark every unread message the reader received in the conversation."""
        repo = current_domain.repository_for(Message)
        unread = repo._dao.query.filter(
            conversation_id=command.conversation_id,
            receiver_id=str(command.reader_id),
            is_read=False,
        ).all()
        for message in unread.items:
            message.mark_read()
            repo.add(message)
        return len(unread.items)

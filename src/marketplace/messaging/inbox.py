"""Message read paths: conversations, threads and unread counts."""

from protean.utils.globals import current_domain

from marketplace.messaging.message import Message, conversation_id_for


def conversation_between(user_id, other_user_id) -> list[Message]:
    """Every message exchanged between the two users, oldest first."""
    repo = current_domain.repository_for(Message)
    messages = repo._dao.query.filter(conversation_id=conversation_id_for(user_id, other_user_id)).all().items
    return sorted(messages, key=lambda message: message.sent_at)


def conversations_for(user_id) -> list[dict]:
    """One summary per conversation the user takes part in, most recent first.

    Each summary holds the conversation id, its latest message, and how many
    messages the user has received there without reading.
    """
    repo = current_domain.repository_for(Message)
    user_id = str(user_id)
    messages = repo._dao.query.filter(sender_id=user_id).all().items + repo._dao.query.filter(receiver_id=user_id).all().items

    summaries = {}
    for message in sorted(messages, key=lambda m: m.sent_at, reverse=True):
        summary = summaries.setdefault(
            message.conversation_id,
            {"conversation_id": message.conversation_id, "last_message": message, "unread_count": 0},
        )
        if str(message.receiver_id) == user_id and not message.is_read:
            summary["unread_count"] += 1
    return list(summaries.values())


def unread_count(user_id) -> int:
    repo = current_domain.repository_for(Message)
    return len(repo._dao.query.filter(receiver_id=str(user_id), is_read=False).all().items)

"""Direct messages scoped to a match; only its two users can read or write."""
import logging
from typing import List

from errors import AuthorizationError, ValidationError
from models import Match, Message
from storage import Storage

logger = logging.getLogger(__name__)


def _participant_match(storage: Storage, match_id: int, user_id: int, action: str) -> Match:
    # A missing match and a foreign match look the same to the caller
    match = storage.get_match(match_id)
    if not match or not match.involves(user_id):
        raise AuthorizationError(f"Not authorized to {action} in this match")
    return match


def list_messages(storage: Storage, match_id: int, user_id: int) -> List[Message]:
    _participant_match(storage, match_id, user_id, "access messages")
    return storage.messages_for_match(match_id)


def send_message(storage: Storage, match_id: int, sender_id: int, content: str) -> Message:
    match = _participant_match(storage, match_id, sender_id, "send messages")
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content cannot be empty")

    message = storage.create_message(
        Message(
            match_id=match.id,
            sender_id=sender_id,
            receiver_id=match.other_user_id(sender_id),
            content=content,
            is_read=False,
        )
    )
    logger.debug("Message %s sent in match %s", message.id, match.id)
    return message


def mark_read(storage: Storage, match_id: int, user_id: int) -> int:
    """Mark every message addressed to `user_id` in the match as read."""
    _participant_match(storage, match_id, user_id, "access messages")
    return storage.mark_messages_read(match_id, user_id)

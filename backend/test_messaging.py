from datetime import datetime, timedelta, timezone

import pytest

import matching
import messaging
from errors import AuthorizationError, ValidationError
from models import Message


@pytest.fixture(name="match")
def match_fixture(storage, users):
    alice, bob = users[0].id, users[1].id
    matching.swipe(storage, alice, bob, "right")
    _, match = matching.swipe(storage, bob, alice, "right")
    return match


def test_send_derives_receiver(storage, users, match):
    alice, bob = users[0].id, users[1].id
    message = messaging.send_message(storage, match.id, alice, "  hi  ")

    assert message.content == "hi"
    assert message.sender_id == alice
    assert message.receiver_id == bob
    assert message.is_read is False

    reply = messaging.send_message(storage, match.id, bob, "hello back")
    assert reply.receiver_id == alice


@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_empty_content_rejected(storage, users, match, content):
    with pytest.raises(ValidationError):
        messaging.send_message(storage, match.id, users[0].id, content)
    assert messaging.list_messages(storage, match.id, users[0].id) == []


def test_outsider_cannot_read_or_write(storage, users, match):
    carol = users[2].id
    with pytest.raises(AuthorizationError):
        messaging.list_messages(storage, match.id, carol)
    with pytest.raises(AuthorizationError):
        messaging.send_message(storage, match.id, carol, "let me in")
    with pytest.raises(AuthorizationError):
        messaging.mark_read(storage, match.id, carol)


def test_unknown_match_is_unauthorized(storage, users):
    with pytest.raises(AuthorizationError):
        messaging.list_messages(storage, 404, users[0].id)
    with pytest.raises(AuthorizationError):
        messaging.send_message(storage, 404, users[0].id, "hi")


def test_messages_ordered_by_sent_time(storage, session, users, match):
    alice, bob, carol = users[0].id, users[1].id, users[2].id
    matching.swipe(storage, alice, carol, "right")
    _, other_match = matching.swipe(storage, carol, alice, "right")

    t1 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    t2 = t1 + timedelta(minutes=5)
    t3 = t1 + timedelta(minutes=10)

    # Inserted out of order and interleaved with another match
    session.add(Message(match_id=match.id, sender_id=alice, receiver_id=bob, content="third", sent_at=t3))
    session.add(Message(match_id=other_match.id, sender_id=carol, receiver_id=alice, content="elsewhere", sent_at=t1))
    session.add(Message(match_id=match.id, sender_id=bob, receiver_id=alice, content="first", sent_at=t1))
    session.add(Message(match_id=match.id, sender_id=alice, receiver_id=bob, content="second", sent_at=t2))
    session.commit()

    contents = [m.content for m in messaging.list_messages(storage, match.id, bob)]
    assert contents == ["first", "second", "third"]

    # Re-querying gives the same sequence
    assert [m.content for m in messaging.list_messages(storage, match.id, alice)] == contents


def test_mark_read_only_touches_received(storage, users, match):
    alice, bob = users[0].id, users[1].id
    messaging.send_message(storage, match.id, alice, "one")
    messaging.send_message(storage, match.id, alice, "two")
    messaging.send_message(storage, match.id, bob, "three")

    assert messaging.mark_read(storage, match.id, bob) == 2
    assert messaging.mark_read(storage, match.id, bob) == 0

    read_flags = {m.content: m.is_read for m in messaging.list_messages(storage, match.id, alice)}
    assert read_flags == {"one": True, "two": True, "three": False}

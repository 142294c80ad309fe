import pytest

from learnassist.dal.conversations import (
    create_chat_message,
    create_conversation,
    delete_conversation_with_messages,
    get_conversation,
    get_conversations_by_user,
    get_last_messages,
    get_messages_by_conversation,
)
from learnassist.database import RecordNotFound, connect, make_session


@pytest.fixture
def session(tmp_path):
    engine = connect(f"sqlite:///{tmp_path / 'db.sqlite'}")
    with make_session(engine) as s:
        yield s
    engine.dispose()


def _fill(session, conv_id, contents):
    for i, text in enumerate(contents):
        create_chat_message(session, conv_id, "user" if i % 2 == 0 else "assistant", text)


def test_create_and_get_conversation(session):
    conv_id = create_conversation(session, 5, "What is a prime?")
    conv = get_conversation(session, conv_id)
    assert conv.id == conv_id
    assert conv.user_id == 5
    assert conv.title == "What is a prime?"


def test_missing_conversation_raises(session):
    with pytest.raises(RecordNotFound):
        get_conversation(session, 404)


def test_last_messages_in_chronological_order(session):
    conv_id = create_conversation(session, 1, "t")
    contents = [f"m{i}" for i in range(5)]
    _fill(session, conv_id, contents)
    last = get_last_messages(session, conv_id, 3)
    assert [m.content for m in last] == contents[-3:]


def test_negative_limit_returns_everything(session):
    conv_id = create_conversation(session, 1, "t")
    contents = [f"m{i}" for i in range(4)]
    _fill(session, conv_id, contents)
    other = create_conversation(session, 1, "other")
    _fill(session, other, ["x"])
    assert [m.content for m in get_last_messages(session, conv_id, -1)] == contents


def test_messages_page_oldest_first(session):
    conv_id = create_conversation(session, 1, "t")
    contents = [f"m{i}" for i in range(5)]
    _fill(session, conv_id, contents)
    page, total = get_messages_by_conversation(session, conv_id, 2, 2)
    assert total == len(contents)
    assert [m.content for m in page] == contents[2:4]


def test_conversations_by_user(session):
    mine = [create_conversation(session, 1, f"c{i}") for i in range(3)]
    create_conversation(session, 2, "not mine")
    items, total = get_conversations_by_user(session, 1, 1, 10)
    assert total == len(mine)
    assert sorted(c.id for c in items) == sorted(mine)
    assert all(c.user_id == 1 for c in items)


def test_delete_conversation_with_messages(session):
    conv_id = create_conversation(session, 1, "t")
    _fill(session, conv_id, ["a", "b"])
    keep = create_conversation(session, 1, "keep")
    _fill(session, keep, ["c"])
    delete_conversation_with_messages(session, conv_id)
    with pytest.raises(RecordNotFound):
        get_conversation(session, conv_id)
    assert get_last_messages(session, conv_id, -1) == []
    assert [m.content for m in get_last_messages(session, keep, -1)] == ["c"]
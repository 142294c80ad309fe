"""Storage of assistant conversations and their messages."""

from __future__ import annotations

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from learnassist.database import RecordNotFound
from learnassist.schema import ChatMessage, Conversation


def _paged(stmt: Select, page: int, page_size: int) -> Select:
    if page_size >= 0:
        stmt = stmt.limit(page_size)
    offset = (page - 1) * page_size
    if offset > 0:
        stmt = stmt.offset(offset)
    return stmt


def _commit(session: Session) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def create_conversation(session: Session, user_id: int, title: str) -> int:
    """Start a conversation for a user and return its id."""
    conversation = Conversation(user_id=user_id, title=title)
    session.add(conversation)
    _commit(session)
    return conversation.id


def get_conversation(session: Session, conversation_id: int) -> Conversation:
    """The conversation with this id.

    Raises RecordNotFound if there is none.
    """
    conversation = session.get(Conversation, conversation_id, populate_existing=True)
    if conversation is None:
        raise RecordNotFound(f"no conversation {conversation_id}")
    return conversation


def create_chat_message(
    session: Session, conversation_id: int, role: str, content: str
) -> ChatMessage:
    """Append a message to a conversation."""
    message = ChatMessage(conversation_id=conversation_id, role=role, content=content)
    session.add(message)
    _commit(session)
    return message


def get_conversations_by_user(
    session: Session, user_id: int, page: int, page_size: int
) -> tuple[list[Conversation], int]:
    """One page of a user's conversations, most recently updated first, with the total."""
    total = session.scalar(
        select(func.count()).select_from(Conversation).where(Conversation.user_id == user_id)
    )
    stmt = _paged(
        select(Conversation)
        .where(Conversation.user_id == user_id)
        .order_by(Conversation.updated_at.desc(), Conversation.id.desc()),
        page,
        page_size,
    )
    return list(session.scalars(stmt)), int(total or 0)


def get_messages_by_conversation(
    session: Session, conversation_id: int, page: int, page_size: int
) -> tuple[list[ChatMessage], int]:
    """One page of a conversation's messages, oldest first, with the total."""
    total = session.scalar(
        select(func.count())
        .select_from(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
    )
    stmt = _paged(
        select(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc()),
        page,
        page_size,
    )
    return list(session.scalars(stmt)), int(total or 0)


def get_last_messages(session: Session, conversation_id: int, limit: int) -> list[ChatMessage]:
    """The latest ``limit`` messages in chronological order; a negative limit means all."""
    stmt = (
        select(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
    )
    if limit >= 0:
        stmt = stmt.limit(limit)
    messages = list(session.scalars(stmt))
    messages.reverse()
    return messages


def delete_conversation_with_messages(session: Session, conversation_id: int) -> None:
    """Remove a conversation and all of its messages in one transaction."""
    try:
        session.execute(
            delete(ChatMessage).where(ChatMessage.conversation_id == conversation_id)
        )
        session.execute(delete(Conversation).where(Conversation.id == conversation_id))
        session.commit()
    except Exception:
        session.rollback()
        raise
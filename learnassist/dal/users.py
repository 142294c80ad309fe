"""Storage of user accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session, selectinload

from learnassist.consts import USER_TYPE_TO_INT
from learnassist.database import RecordNotFound
from learnassist.schema import User


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


def _live() -> Select:
    return select(User).where(User.deleted_at.is_(None))


def _first_or_raise(session: Session, stmt: Select, what: str) -> User:
    user = session.scalars(stmt.execution_options(populate_existing=True)).first()
    if user is None:
        raise RecordNotFound(f"no user with {what}")
    return user


def create_user(session: Session, user: User) -> User:
    """Store a new user and return it with its id filled in."""
    session.add(user)
    _commit(session)
    return user


def update_user(session: Session, user: User) -> User:
    """Save every field of a user and return the stored instance."""
    stored = session.merge(user)
    _commit(session)
    return stored


def update_user_with_groups(session: Session, user: User) -> User:
    """Save a user and replace its chat group memberships in one transaction."""
    try:
        stored = session.merge(user)
        stored.chat_groups = list(user.chat_groups)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return stored


def get_user_by_id(session: Session, user_id: int) -> User:
    """The user with its chat groups and favourite courses.

    Raises RecordNotFound if there is none.
    """
    stmt = (
        _live()
        .where(User.id == user_id)
        .options(selectinload(User.chat_groups), selectinload(User.favorite_courses))
    )
    return _first_or_raise(session, stmt, f"id {user_id}")


def get_user_by_email(session: Session, email: str) -> User:
    """The user with this e-mail address.

    Raises RecordNotFound if there is none.
    """
    stmt = _live().where(User.email == email).options(selectinload(User.chat_groups))
    return _first_or_raise(session, stmt, f"email {email!r}")


def get_user_by_username(session: Session, username: str) -> User:
    """The user with this username.

    Raises RecordNotFound if there is none.
    """
    stmt = _live().where(User.username == username).options(selectinload(User.chat_groups))
    return _first_or_raise(session, stmt, f"username {username!r}")


def delete_user(session: Session, user_id: int) -> None:
    """Mark a user as deleted."""
    session.execute(
        update(User)
        .where(User.id == user_id, User.deleted_at.is_(None))
        .values(deleted_at=datetime.now())
    )
    _commit(session)


def get_users_page(session: Session, page: int, page_size: int) -> tuple[list[User], int]:
    """One page of users, newest first, with the total count."""
    total = session.scalar(
        select(func.count()).select_from(User).where(User.deleted_at.is_(None))
    )
    stmt = _paged(
        _live().order_by(User.created_at.desc(), User.id.desc()), page, page_size
    ).execution_options(populate_existing=True)
    return list(session.scalars(stmt)), int(total or 0)


def get_users_by_class(session: Session, class_id: int) -> list[User]:
    """Users of a class, newest first."""
    stmt = (
        _live()
        .where(User.class_id == class_id)
        .order_by(User.created_at.desc(), User.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))


def get_users_by_type(session: Session, user_type: str) -> list[User]:
    """Users of a type given by name; an unknown name selects the code 0."""
    code = USER_TYPE_TO_INT.get(user_type, 0)
    stmt = (
        _live()
        .where(User.user_type == code)
        .order_by(User.id)
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))
"""Storage of classes and their teachers."""

from __future__ import annotations

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from learnassist.database import RecordNotFound
from learnassist.schema import Class, ClassTeacher


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


def create_class(session: Session, name: str, grade: str, class_num: str) -> Class:
    """Store a new class and return it."""
    clazz = Class(name=name, grade=grade, class_num=class_num)
    session.add(clazz)
    _commit(session)
    return clazz


def assign_teacher_to_class(session: Session, teacher_id: int, class_id: int) -> ClassTeacher:
    """Record that a teacher teaches a class."""
    relation = ClassTeacher(teacher_id=teacher_id, class_id=class_id)
    session.add(relation)
    _commit(session)
    return relation


def get_classes_by_teacher(session: Session, teacher_id: int) -> list[Class]:
    """Classes a teacher is bound to."""
    stmt = (
        select(Class)
        .join(ClassTeacher, Class.id == ClassTeacher.class_id)
        .where(ClassTeacher.teacher_id == teacher_id)
        .order_by(Class.id)
    )
    return list(session.scalars(stmt))


def get_class_by_class_num(session: Session, class_num: str) -> Class:
    """The class with this invitation number.

    Raises RecordNotFound if there is none.
    """
    clazz = session.scalars(
        select(Class).where(Class.class_num == class_num).order_by(Class.id).limit(1)
    ).first()
    if clazz is None:
        raise RecordNotFound(f"no class with number {class_num!r}")
    return clazz


def get_teachers_by_class(session: Session, class_id: int) -> list[int]:
    """Ids of the teachers bound to a class."""
    stmt = (
        select(ClassTeacher.teacher_id)
        .where(ClassTeacher.class_id == class_id)
        .order_by(ClassTeacher.id)
    )
    return list(session.scalars(stmt))


def remove_teacher_from_class(session: Session, teacher_id: int, class_id: int) -> None:
    """Unbind a teacher from a class."""
    session.execute(
        delete(ClassTeacher).where(
            ClassTeacher.teacher_id == teacher_id, ClassTeacher.class_id == class_id
        )
    )
    _commit(session)


def get_all_classes(session: Session) -> list[Class]:
    """Every class."""
    return list(session.scalars(select(Class).order_by(Class.id)))


def get_classes_page(session: Session, page: int, page_size: int) -> tuple[list[Class], int]:
    """One page of classes, newest first, with the total count."""
    total = session.scalar(select(func.count()).select_from(Class))
    stmt = _paged(
        select(Class).order_by(Class.created_at.desc(), Class.id.desc()), page, page_size
    )
    return list(session.scalars(stmt)), int(total or 0)


def delete_class(session: Session, class_id: int) -> None:
    """Remove a class."""
    session.execute(delete(Class).where(Class.id == class_id))
    _commit(session)
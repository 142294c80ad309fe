"""Storage of assignments."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session, selectinload

from learnassist.schema import Assignment


def _with_relations(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Assignment.teacher), selectinload(Assignment.course)
    ).execution_options(populate_existing=True)


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


def create_assignment(
    session: Session,
    title: str,
    content: str,
    course_id: int,
    teacher_id: int,
    class_id: int,
    due: datetime,
) -> Assignment:
    """Store a new assignment and return it."""
    assignment = Assignment(
        title=title,
        content=content,
        course_id=course_id,
        teacher_id=teacher_id,
        class_id=class_id,
        due_date=due,
    )
    session.add(assignment)
    _commit(session)
    return assignment


def get_all_assignments(session: Session) -> list[Assignment]:
    """Every assignment with its teacher and course loaded."""
    stmt = _with_relations(select(Assignment).order_by(Assignment.id))
    return list(session.scalars(stmt))


def get_assignments_by_course(session: Session, course_id: int) -> list[Assignment]:
    """Assignments of a course, earliest due date first."""
    stmt = _with_relations(
        select(Assignment)
        .where(Assignment.course_id == course_id)
        .order_by(Assignment.due_date.asc(), Assignment.id.asc())
    )
    return list(session.scalars(stmt))


def get_assignments_by_teacher(session: Session, teacher_id: int) -> list[Assignment]:
    """Assignments set by a teacher."""
    stmt = _with_relations(
        select(Assignment)
        .where(Assignment.teacher_id == teacher_id)
        .order_by(Assignment.id)
    )
    return list(session.scalars(stmt))


def get_assignments_by_class(session: Session, class_id: int) -> list[Assignment]:
    """Assignments set for a class."""
    stmt = _with_relations(
        select(Assignment).where(Assignment.class_id == class_id).order_by(Assignment.id)
    )
    return list(session.scalars(stmt))


def delete_assignment(session: Session, assignment_id: int) -> None:
    """Remove an assignment; removing a missing one is not an error."""
    session.execute(delete(Assignment).where(Assignment.id == assignment_id))
    _commit(session)


def get_assignments_by_class_page(
    session: Session, class_id: int, page: int, page_size: int
) -> tuple[list[Assignment], int]:
    """One page of a class's assignments, latest due date first, with the total count."""
    total = session.scalar(
        select(func.count()).select_from(Assignment).where(Assignment.class_id == class_id)
    )
    stmt = _with_relations(
        _paged(
            select(Assignment)
            .where(Assignment.class_id == class_id)
            .order_by(Assignment.due_date.desc(), Assignment.id.desc()),
            page,
            page_size,
        )
    )
    return list(session.scalars(stmt)), int(total or 0)


def get_assignment_by_id(session: Session, assignment_id: int) -> Optional[Assignment]:
    """The assignment with its teacher and course, or None if there is none."""
    stmt = _with_relations(select(Assignment).where(Assignment.id == assignment_id))
    return session.scalars(stmt).first()
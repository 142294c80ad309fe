"""Storage of assignment submissions and their evaluation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session, selectinload

from learnassist.database import RecordNotFound
from learnassist.schema import AssignmentSubmission


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


def submit_assignment(
    session: Session, assignment_id: int, student_id: int, content: str, title: str
) -> AssignmentSubmission:
    """Store a student's answer to an assignment, stamped with the current time."""
    submission = AssignmentSubmission(
        assignment_id=assignment_id,
        student_id=student_id,
        content=content,
        title=title,
        submitted_at=datetime.now(),
    )
    session.add(submission)
    _commit(session)
    return submission


def get_my_submissions(session: Session, student_id: int) -> list[AssignmentSubmission]:
    """Every submission of a student, with its assignment loaded."""
    stmt = (
        select(AssignmentSubmission)
        .where(AssignmentSubmission.student_id == student_id)
        .options(selectinload(AssignmentSubmission.assignment))
        .order_by(AssignmentSubmission.id)
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))


def get_submission_by_id(session: Session, submission_id: int) -> AssignmentSubmission:
    """The submission with this id.

    Raises RecordNotFound if there is none.
    """
    stmt = (
        select(AssignmentSubmission)
        .where(AssignmentSubmission.id == submission_id)
        .execution_options(populate_existing=True)
    )
    submission = session.scalars(stmt).first()
    if submission is None:
        raise RecordNotFound(f"no submission {submission_id}")
    return submission


def get_submissions_by_assignment(
    session: Session, assignment_id: int
) -> list[AssignmentSubmission]:
    """Every submission to an assignment, with assignment and student loaded."""
    stmt = (
        select(AssignmentSubmission)
        .where(AssignmentSubmission.assignment_id == assignment_id)
        .options(
            selectinload(AssignmentSubmission.assignment),
            selectinload(AssignmentSubmission.student),
        )
        .order_by(AssignmentSubmission.id)
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))


def get_submission_by_assignment_and_user(
    session: Session, assignment_id: int, user_id: int
) -> Optional[AssignmentSubmission]:
    """A student's latest submission to an assignment, or None if there is none."""
    stmt = (
        select(AssignmentSubmission)
        .where(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.student_id == user_id,
        )
        .order_by(AssignmentSubmission.submitted_at.desc(), AssignmentSubmission.id.desc())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    return session.scalars(stmt).first()


def get_assignment_submissions_page(
    session: Session, assignment_id: int, page: int, page_size: int
) -> tuple[list[AssignmentSubmission], int]:
    """One page of submissions, latest first, with the total count.

    An ``assignment_id`` of 0 selects the submissions of every assignment.
    """
    count = select(func.count()).select_from(AssignmentSubmission)
    stmt = select(AssignmentSubmission).order_by(
        AssignmentSubmission.submitted_at.desc(), AssignmentSubmission.id.desc()
    )
    if assignment_id > 0:
        condition = AssignmentSubmission.assignment_id == assignment_id
        count = count.where(condition)
        stmt = stmt.where(condition)
    total = session.scalar(count)
    stmt = _paged(stmt, page, page_size).execution_options(populate_existing=True)
    return list(session.scalars(stmt)), int(total or 0)


def update_submission_evaluation(
    session: Session,
    submission_id: int,
    score: float,
    feedback: str,
    reviewed_at: Optional[datetime],
) -> None:
    """Record a teacher's score, feedback and review time for a submission."""
    session.execute(
        update(AssignmentSubmission)
        .where(AssignmentSubmission.id == submission_id)
        .values(score=score, feedback=feedback, reviewed_at=reviewed_at)
    )
    _commit(session)
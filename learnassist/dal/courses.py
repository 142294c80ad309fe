"""Storage of courses, subjects and favourites."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from learnassist.database import RecordNotFound
from learnassist.schema import Course, CourseSubject, Subject, UserCourseFavorite


def _commit(session: Session) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def _subjects_by_ids(session: Session, subject_ids: Iterable[int]) -> list[Subject]:
    ids = list(subject_ids or ())
    return list(session.scalars(select(Subject).where(Subject.id.in_(ids))))


def create_subject(session: Session, name: str) -> Subject:
    """Store a new subject and return it."""
    subject = Subject(name=name)
    session.add(subject)
    _commit(session)
    return subject


def get_all_subjects(session: Session) -> list[Subject]:
    """Every subject."""
    return list(session.scalars(select(Subject).order_by(Subject.id)))


def create_course_with_subjects(
    session: Session,
    name: str,
    teacher_id: int,
    class_id: int,
    description: str,
    page_url: str,
    subject_ids: Iterable[int],
    total_minutes: int,
    course_detail: str,
) -> Course:
    """Store a new course linked to the existing subjects among ``subject_ids``."""
    course = Course(
        name=name,
        teacher_id=teacher_id,
        class_id=class_id,
        description=description,
        page_url=page_url,
        subjects=_subjects_by_ids(session, subject_ids),
        total_time_minutes=total_minutes,
        course_detail=course_detail,
    )
    session.add(course)
    _commit(session)
    return course


def get_courses_by_class(session: Session, class_id: int) -> list[Course]:
    """Courses of a class."""
    stmt = select(Course).where(Course.class_id == class_id).order_by(Course.id)
    return list(session.scalars(stmt))


def get_courses_by_teacher(session: Session, teacher_id: int) -> list[Course]:
    """Courses of a teacher."""
    stmt = select(Course).where(Course.teacher_id == teacher_id).order_by(Course.id)
    return list(session.scalars(stmt))


def get_course_with_subjects(session: Session, course_id: int) -> Course:
    """The course with its subjects and the users who favourited it.

    Raises RecordNotFound if there is none.
    """
    stmt = (
        select(Course)
        .where(Course.id == course_id)
        .options(selectinload(Course.subjects), selectinload(Course.favorite_by))
        .execution_options(populate_existing=True)
    )
    course = session.scalars(stmt).first()
    if course is None:
        raise RecordNotFound(f"no course {course_id}")
    return course


def delete_course(session: Session, course_id: int) -> None:
    """Remove a course."""
    session.execute(delete(Course).where(Course.id == course_id))
    _commit(session)


def get_courses_by_subject(session: Session, subject_id: int) -> list[Course]:
    """Courses that cover a subject."""
    stmt = (
        select(Course)
        .join(CourseSubject, CourseSubject.course_id == Course.id)
        .where(CourseSubject.subject_id == subject_id)
        .order_by(Course.id)
    )
    return list(session.scalars(stmt))


def get_all_courses_with_subjects(session: Session) -> list[Course]:
    """Every course with its subjects."""
    stmt = (
        select(Course)
        .options(selectinload(Course.subjects))
        .order_by(Course.id)
        .execution_options(populate_existing=True)
    )
    return list(session.scalars(stmt))


def get_courses_page(session: Session, page: int, page_size: int) -> tuple[list[Course], int]:
    """One page of courses, newest first, with the total count.

    A negative page or page size returns every course.
    """
    if page < 0 or page_size < 0:
        courses = get_all_courses_with_subjects(session)
        return courses, len(courses)
    total = session.scalar(select(func.count()).select_from(Course))
    stmt = (
        select(Course)
        .options(selectinload(Course.subjects))
        .order_by(Course.created_at.desc(), Course.id.desc())
        .limit(page_size)
        .execution_options(populate_existing=True)
    )
    offset = (page - 1) * page_size
    if offset > 0:
        stmt = stmt.offset(offset)
    return list(session.scalars(stmt)), int(total or 0)


def get_course_by_id(session: Session, course_id: int) -> Course:
    """The course with its subjects.

    Raises RecordNotFound if there is none.
    """
    stmt = (
        select(Course)
        .where(Course.id == course_id)
        .options(selectinload(Course.subjects))
        .execution_options(populate_existing=True)
    )
    course = session.scalars(stmt).first()
    if course is None:
        raise RecordNotFound(f"no course {course_id}")
    return course


def update_course_with_subjects(
    session: Session,
    course_id: int,
    name: str,
    description: str,
    page_url: str,
    subject_ids: Iterable[int],
    total_minutes: int,
) -> Course:
    """Change a course's fields and replace its subjects.

    Raises RecordNotFound if the course does not exist.
    """
    course = get_course_by_id(session, course_id)
    course.name = name
    course.description = description
    course.page_url = page_url
    course.subjects = _subjects_by_ids(session, subject_ids)
    course.total_time_minutes = total_minutes
    _commit(session)
    return course


def increment_course_view(session: Session, course_id: int) -> None:
    """Add one to a course's view counter."""
    session.execute(
        update(Course)
        .where(Course.id == course_id)
        .values(view_count=Course.view_count + 1)
    )
    _commit(session)


def add_favorite(session: Session, user_id: int, course_id: int) -> UserCourseFavorite:
    """Record that a user favourited a course."""
    favorite = UserCourseFavorite(
        user_id=user_id, course_id=course_id, created_at=datetime.now()
    )
    session.add(favorite)
    _commit(session)
    return favorite


def get_favorite(session: Session, user_id: int, course_id: int) -> UserCourseFavorite:
    """The favourite record of a user and course.

    Raises RecordNotFound if the user has not favourited the course.
    """
    stmt = select(UserCourseFavorite).where(
        UserCourseFavorite.user_id == user_id, UserCourseFavorite.course_id == course_id
    )
    favorite = session.scalars(stmt).first()
    if favorite is None:
        raise RecordNotFound(f"user {user_id} has not favourited course {course_id}")
    return favorite


def remove_favorite(session: Session, user_id: int, course_id: int) -> None:
    """Forget that a user favourited a course."""
    session.execute(
        delete(UserCourseFavorite).where(
            UserCourseFavorite.user_id == user_id,
            UserCourseFavorite.course_id == course_id,
        )
    )
    _commit(session)


def get_top_viewed_courses(session: Session, limit: int) -> list[Course]:
    """The most viewed courses; ties go to the newer course."""
    stmt = (
        select(Course)
        .options(selectinload(Course.subjects))
        .order_by(Course.view_count.desc(), Course.created_at.desc(), Course.id.desc())
        .execution_options(populate_existing=True)
    )
    if limit >= 0:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt))
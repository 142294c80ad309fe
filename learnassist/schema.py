"""Relational schema of the learning assistant."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from learnassist.consts import user_type_name


def _now() -> datetime:
    return datetime.now()


class Base(DeclarativeBase):
    """Declarative base holding the metadata of every table."""


class _SoftDeleteModel:
    """Common columns: id, creation/update times and a soft-delete marker."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, index=True, default=None
    )


group_members = Table(
    "group_members",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("chat_group_id", ForeignKey("chat_groups.id"), primary_key=True),
)


def format_duration(total_minutes: int) -> str:
    """Render a minute count as zero-padded hours and minutes."""
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}小时{minutes:02d}分钟"


def subjects_map(subjects: Iterable[Subject]) -> dict[int, str]:
    """Map subject ids to subject names."""
    return {subject.id: subject.name for subject in subjects}


class ImageHash(_SoftDeleteModel, Base):
    """Perceptual hash of an image, bound to a media record."""

    __tablename__ = "image_hashes"

    url: Mapped[str] = mapped_column(String(255), default="")
    hash_value: Mapped[str] = mapped_column("hash", String(100), default="")
    desc: Mapped[str] = mapped_column(String(255), default="")
    media_id: Mapped[int] = mapped_column(Integer, unique=True, default=0)


class Media(_SoftDeleteModel, Base):
    """A stored piece of media: text, image, video and so on."""

    __tablename__ = "media"

    content: Mapped[str] = mapped_column(Text, default="")
    media_type: Mapped[str] = mapped_column("type", String(10), default="text")
    url: Mapped[str] = mapped_column(String(255), default="")


class Message(_SoftDeleteModel, Base):
    """A private or group chat message."""

    __tablename__ = "messages"

    sender_id: Mapped[int] = mapped_column(Integer, default=0)
    receiver_id: Mapped[int] = mapped_column(Integer, default=0)
    room_id: Mapped[int] = mapped_column(Integer, default=0)
    content: Mapped[str] = mapped_column(Text, default="")
    message_type: Mapped[str] = mapped_column(String(20), default="")
    timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    is_send: Mapped[bool] = mapped_column(Boolean, default=False)


class ChatGroup(_SoftDeleteModel, Base):
    """A chat group with its member users."""

    __tablename__ = "chat_groups"

    name: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(String(1024), default="")
    creator_id: Mapped[int] = mapped_column(Integer, default=0)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)
    members: Mapped[list[User]] = relationship(
        secondary=group_members, back_populates="chat_groups"
    )


class UserCourseFavorite(Base):
    """A user's bookmark of a course."""

    __tablename__ = "user_course_favorites"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class User(_SoftDeleteModel, Base):
    """An account: administrator, teacher or student."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(128), default="")
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, default="")
    phone_number: Mapped[str] = mapped_column(String(20), default="")
    gender: Mapped[str] = mapped_column(String(10), default="")
    date_of_birth: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    address: Mapped[str] = mapped_column(String(256), default="")
    city: Mapped[str] = mapped_column(String(64), default="")
    state: Mapped[str] = mapped_column(String(64), default="")
    country: Mapped[str] = mapped_column(String(64), default="")
    postal_code: Mapped[str] = mapped_column(String(20), default="")
    status: Mapped[str] = mapped_column(String(20), default="")
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    class_id: Mapped[int] = mapped_column(Integer, default=0)
    class_stage: Mapped[str] = mapped_column(String(20), default="")
    add_class_time: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    user_type: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(64), default="")

    chat_groups: Mapped[list[ChatGroup]] = relationship(
        secondary=group_members, back_populates="members"
    )
    favorite_courses: Mapped[list[Course]] = relationship(
        secondary="user_course_favorites", back_populates="favorite_by"
    )

    def type_name(self) -> str:
        """The user type as a name, or "" for an unknown code."""
        return user_type_name(self.user_type)


class Class(Base):
    """A school class, identified to students by its invitation number."""

    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    grade: Mapped[str] = mapped_column(String(100), default="")
    class_num: Mapped[str] = mapped_column(String(50), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class ClassTeacher(Base):
    """Link between a teacher and a class they teach."""

    __tablename__ = "class_teachers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    teacher_id: Mapped[int] = mapped_column(Integer)
    class_id: Mapped[int] = mapped_column(Integer)


class Subject(Base):
    """A school subject such as mathematics."""

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class CourseSubject(Base):
    """Link between a course and one of its subjects."""

    __tablename__ = "course_subjects"

    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), primary_key=True)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), primary_key=True)


class Course(Base):
    """A course with its subjects, view counter and favourites."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    teacher_id: Mapped[int] = mapped_column(Integer, default=0)
    class_id: Mapped[int] = mapped_column(Integer, default=0)
    page_url: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    total_time_minutes: Mapped[int] = mapped_column(Integer, default=0)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    course_detail: Mapped[str] = mapped_column(Text, default="")

    favorite_by: Mapped[list[User]] = relationship(
        secondary="user_course_favorites", back_populates="favorite_courses"
    )
    subjects: Mapped[list[Subject]] = relationship(secondary="course_subjects")

    def duration(self) -> str:
        """The course length as zero-padded hours and minutes."""
        return format_duration(self.total_time_minutes or 0)

    def subject_map(self) -> dict[int, str]:
        """Subject ids of the course mapped to their names."""
        return subjects_map(self.subjects)


class Assignment(Base):
    """Homework set by a teacher for a class within a course."""

    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    content: Mapped[str] = mapped_column(Text)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"))
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    class_id: Mapped[int] = mapped_column(Integer)

    course: Mapped[Course] = relationship()
    teacher: Mapped[User] = relationship()


class AssignmentSubmission(Base):
    """A student's answer to an assignment, with the teacher's evaluation."""

    __tablename__ = "assignment_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    assignment_id: Mapped[int] = mapped_column(Integer)
    student_id: Mapped[int] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text, default="")
    title: Mapped[str] = mapped_column(Text, default="")
    score: Mapped[float] = mapped_column(Float, default=0.0)
    feedback: Mapped[str] = mapped_column(Text, default="")
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)

    assignment: Mapped[Optional[Assignment]] = relationship(
        primaryjoin="foreign(AssignmentSubmission.assignment_id) == Assignment.id",
        viewonly=True,
    )
    student: Mapped[Optional[User]] = relationship(
        primaryjoin="foreign(AssignmentSubmission.student_id) == User.id",
        viewonly=True,
    )


class Conversation(Base):
    """A chat session between a user and the assistant."""

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(128), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)


class ChatMessage(Base):
    """One message of a conversation, sent by the user or the assistant."""

    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    conversation_id: Mapped[int] = mapped_column(Integer, index=True)
    role: Mapped[str] = mapped_column(String(16), default="")
    content: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
import re
from datetime import datetime

import pytest
from sqlalchemy import create_engine, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnassist.consts import USER_TYPE_STUDENT, USER_TYPE_TEACHER
from learnassist.schema import (
    Assignment,
    AssignmentSubmission,
    Base,
    ChatGroup,
    ChatMessage,
    Conversation,
    Course,
    ImageHash,
    Media,
    Subject,
    User,
    UserCourseFavorite,
    format_duration,
    subjects_map,
)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.mark.parametrize("minutes", [0, 1, 59, 60, 61, 125, 600, 6001])
def test_format_duration_encodes_minutes(minutes):
    text_value = format_duration(minutes)
    match = re.fullmatch(r"(\d{2,})小时(\d{2})分钟", text_value)
    assert match is not None
    assert int(match.group(1)) * 60 + int(match.group(2)) == minutes
    assert int(match.group(2)) < 60


def test_format_duration_pads_with_zeros():
    assert format_duration(5) == "00小时05分钟"


def test_subjects_map_keys_by_id():
    subjects = [Subject(id=3, name="数学"), Subject(id=7, name="语文")]
    assert subjects_map(subjects) == {3: "数学", 7: "语文"}


def test_user_type_name():
    assert User(username="a", user_type=2).type_name() == USER_TYPE_STUDENT
    assert User(username="b", user_type=1).type_name() == USER_TYPE_TEACHER
    assert User(username="c", user_type=99).type_name() == ""


def test_join_tables_hold_links(session):
    subject = Subject(name="地理")
    course = Course(name="maps", subjects=[subject])
    group = ChatGroup(name="club")
    member = User(username="carol", email="carol@example.com")
    group.members.append(member)
    session.add_all([course, group])
    session.commit()

    course_rows = session.execute(
        text("SELECT course_id, subject_id FROM course_subjects")
    ).all()
    assert [tuple(r) for r in course_rows] == [(course.id, subject.id)]
    member_rows = session.execute(text("SELECT * FROM group_members")).all()
    assert len(member_rows) == 1
    assert set(member_rows[0]) == {group.id, member.id}


def test_course_defaults_and_subjects(session):
    math = Subject(name="数学")
    chinese = Subject(name="语文")
    course = Course(name="algebra", total_time_minutes=95, subjects=[math, chinese])
    session.add(course)
    session.commit()

    loaded = session.get(Course, course.id)
    assert loaded.view_count == 0
    assert isinstance(loaded.created_at, datetime)
    assert loaded.duration() == format_duration(95)
    assert loaded.subject_map() == {math.id: "数学", chinese.id: "语文"}


def test_favorites_link_both_sides(session):
    user = User(username="alice", email="alice@example.com")
    course = Course(name="physics")
    user.favorite_courses.append(course)
    session.add(user)
    session.commit()
    session.expire_all()

    loaded_course = session.get(Course, course.id)
    assert [u.username for u in loaded_course.favorite_by] == ["alice"]
    row = session.scalars(select(UserCourseFavorite)).one()
    assert (row.user_id, row.course_id) == (user.id, course.id)
    assert row.created_at is not None


def test_assignment_relationships(session):
    teacher = User(username="teach", email="teach@example.com", user_type=1)
    course = Course(name="chemistry")
    session.add_all([teacher, course])
    session.flush()
    assignment = Assignment(
        title="hw1",
        content="do it",
        course_id=course.id,
        teacher_id=teacher.id,
        class_id=4,
    )
    session.add(assignment)
    session.commit()
    session.expire_all()

    loaded = session.get(Assignment, assignment.id)
    assert loaded.course.name == "chemistry"
    assert loaded.teacher.username == "teach"
    assert loaded.due_date is None


def test_submission_defaults_and_links(session):
    student = User(username="stu", email="stu@example.com", user_type=2)
    course = Course(name="history")
    session.add_all([student, course])
    session.flush()
    assignment = Assignment(
        title="essay", content="write", course_id=course.id,
        teacher_id=student.id, class_id=1,
    )
    session.add(assignment)
    session.flush()
    sub = AssignmentSubmission(
        assignment_id=assignment.id, student_id=student.id, content="answer"
    )
    session.add(sub)
    session.commit()
    session.expire_all()

    loaded = session.get(AssignmentSubmission, sub.id)
    assert loaded.score == 0.0
    assert loaded.reviewed_at is None
    assert loaded.assignment.title == "essay"
    assert loaded.student.username == "stu"


def test_duplicate_username_rejected(session):
    session.add(User(username="dup", email="one@example.com"))
    session.commit()
    session.add(User(username="dup", email="two@example.com"))
    with pytest.raises(IntegrityError):
        session.commit()


def test_chat_group_members(session):
    group = ChatGroup(name="study")
    user = User(username="bob", email="bob@example.com")
    group.members.append(user)
    session.add(group)
    session.commit()
    session.expire_all()

    loaded_user = session.get(User, user.id)
    assert [g.name for g in loaded_user.chat_groups] == ["study"]
    assert loaded_user.deleted_at is None


def test_image_hash_round_trip_and_unique_media(session):
    image = ImageHash(url="http://img.example.com/a.png", hash_value="abc",
                      desc="cat", media_id=5)
    session.add(image)
    session.commit()
    session.expire_all()
    loaded = session.get(ImageHash, image.id)
    assert (loaded.url, loaded.hash_value, loaded.desc, loaded.media_id) == (
        "http://img.example.com/a.png", "abc", "cat", 5,
    )
    session.add(ImageHash(hash_value="def", media_id=5))
    with pytest.raises(IntegrityError):
        session.commit()


def test_media_default_type(session):
    media = Media(content="hello")
    session.add(media)
    session.commit()
    assert session.get(Media, media.id).media_type == "text"


def test_conversation_and_messages(session):
    conv = Conversation(user_id=9, title="q")
    session.add(conv)
    session.flush()
    session.add(ChatMessage(conversation_id=conv.id, role="user", content="hi"))
    session.commit()
    msgs = session.scalars(
        select(ChatMessage).where(ChatMessage.conversation_id == conv.id)
    ).all()
    assert [(m.role, m.content) for m in msgs] == [("user", "hi")]
    assert conv.updated_at >= conv.created_at
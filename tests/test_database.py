import pytest
from sqlalchemy import inspect, select

from learnassist.database import (
    RecordNotFound,
    build_mysql_url,
    connect,
    make_session,
    migrate,
)
from learnassist.schema import Base, Subject


def test_build_mysql_url_fields():
    password = "password"
    url = build_mysql_url("user", password, "localhost", "3306", "school")
    assert url.drivername.startswith("mysql")
    assert url.username == "user"
    assert url.password == password
    assert url.host == "localhost"
    assert url.port == 3306
    assert url.database == "school"
    assert url.query["charset"] == "utf8mb4"


def test_connect_creates_all_tables():
    engine = connect("sqlite://")
    try:
        assert set(inspect(engine).get_table_names()) == set(Base.metadata.tables)
    finally:
        engine.dispose()


def test_migrate_is_idempotent(tmp_path):
    engine = connect(f"sqlite:///{tmp_path / 'db.sqlite'}")
    try:
        before = set(inspect(engine).get_table_names())
        migrate(engine)
        assert set(inspect(engine).get_table_names()) == before
    finally:
        engine.dispose()


def test_connect_failure_raises(tmp_path):
    with pytest.raises(RuntimeError):
        connect(f"sqlite:///{tmp_path / 'missing' / 'nested' / 'db.sqlite'}")


def test_connect_unknown_dialect_raises():
    with pytest.raises(RuntimeError):
        connect("nosuchdialect://localhost/db")


def test_make_session_keeps_objects_after_commit(tmp_path):
    engine = connect(f"sqlite:///{tmp_path / 'db.sqlite'}")
    try:
        with make_session(engine) as session:
            subject = Subject(name="英语")
            session.add(subject)
            session.commit()
            assert subject.name == "英语"
            subject_id = subject.id
        with make_session(engine) as other:
            found = other.scalars(select(Subject).where(Subject.id == subject_id)).one()
            assert found.name == "英语"
    finally:
        engine.dispose()


def test_record_not_found_message_and_kind():
    err = RecordNotFound("course 3")
    assert str(err) == "course 3"
    assert isinstance(err, LookupError)
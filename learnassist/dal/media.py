"""Storage of image hashes, media records and chat messages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnassist.database import RecordNotFound
from learnassist.schema import ImageHash, Media, Message

log = logging.getLogger(__name__)

_Record = TypeVar("_Record", ImageHash, Media, Message)


def _commit(session: Session, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        log.error("error %s", action)
        raise


def _read_live(session: Session, model: type[_Record], record_id: int) -> _Record:
    stmt = (
        select(model)
        .where(model.id == record_id, model.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    record = session.scalars(stmt).first()
    if record is None:
        log.error("error reading %s by id %s: not found", model.__name__, record_id)
        raise RecordNotFound(f"no {model.__name__} {record_id}")
    return record


def _soft_delete(session: Session, model: type[_Record], record_id: int) -> None:
    session.execute(
        update(model)
        .where(model.id == record_id, model.deleted_at.is_(None))
        .values(deleted_at=datetime.now())
    )
    _commit(session, f"deleting {model.__name__} {record_id}")


def _get_any(session: Session, model: type[_Record], record_id: int) -> Optional[_Record]:
    return session.get(model, record_id, populate_existing=True)


def create_image_hash(
    session: Session, url: str, hash_value: str, desc: str, media_id: int
) -> int:
    """Store the hash of an image and return the new record's id."""
    record = ImageHash(url=url, hash_value=hash_value, desc=desc, media_id=media_id)
    session.add(record)
    _commit(session, "creating ImageHash")
    return record.id


def read_image_hash(session: Session, image_id: int) -> ImageHash:
    """The image hash with this id.

    Raises RecordNotFound if there is none or it was deleted.
    """
    return _read_live(session, ImageHash, image_id)


def update_image_hash(
    session: Session,
    image_id: int,
    url: str,
    hash_value: str,
    desc: str,
    media_id: int,
) -> ImageHash:
    """Overwrite the image hash with this id, creating it if it does not exist."""
    record = _get_any(session, ImageHash, image_id)
    if record is None:
        record = ImageHash(id=image_id)
        session.add(record)
    record.url = url
    record.hash_value = hash_value
    record.desc = desc
    record.media_id = media_id
    record.deleted_at = None
    _commit(session, "updating ImageHash")
    return record


def delete_image_hash(session: Session, image_id: int) -> None:
    """Mark the image hash with this id as deleted."""
    _soft_delete(session, ImageHash, image_id)


def create_media(session: Session, content: str, media_type: str, url: str) -> Media:
    """Store a new media record and return it."""
    media = Media(content=content, media_type=media_type, url=url)
    session.add(media)
    _commit(session, "creating Media")
    return media


def read_media(session: Session, media_id: int) -> Media:
    """The media record with this id.

    Raises RecordNotFound if there is none or it was deleted.
    """
    return _read_live(session, Media, media_id)


def update_media(
    session: Session, media_id: int, content: str, media_type: str, url: str
) -> Media:
    """Overwrite the media record with this id, creating it if it does not exist."""
    media = _get_any(session, Media, media_id)
    if media is None:
        media = Media(id=media_id)
        session.add(media)
    media.content = content
    media.media_type = media_type
    media.url = url
    media.deleted_at = None
    _commit(session, "updating Media")
    return media


def delete_media(session: Session, media_id: int) -> None:
    """Mark the media record with this id as deleted."""
    _soft_delete(session, Media, media_id)


def create_message(session: Session, message: Message) -> Message:
    """Store a chat message and return it with its id filled in."""
    session.add(message)
    _commit(session, "creating Message")
    return message


def update_message(session: Session, message: Message) -> Message:
    """Save every field of a chat message and return the stored instance."""
    stored = session.merge(message)
    _commit(session, "updating Message")
    return stored
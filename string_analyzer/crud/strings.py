from datetime import datetime, timezone
import json
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from string_analyzer.models.string_record import StringRecord
from string_analyzer.services.analyzer import analyze_string
from string_analyzer.services.filters import FilterSet, apply_filters

logger = logging.getLogger(__name__)


class StringAlreadyExistsError(Exception):
    """Raised when a value is already recorded in the store."""

    def __init__(self, value: str):
        self.value = value
        super().__init__("String already exists")


def create_string_record(db: Session, value: str) -> StringRecord:
    """
    Analyze ``value`` and insert it.

    The primary key on ``value`` decides conflicts: a failed insert
    because the key exists becomes StringAlreadyExistsError.
    """
    properties = analyze_string(value)

    db_string = StringRecord(
        value=value,
        sha256_hash=properties["sha256_hash"],
        length=properties["length"],
        is_palindrome=properties["is_palindrome"],
        unique_characters=properties["unique_characters"],
        word_count=properties["word_count"],
        character_frequency_map=json.dumps(properties["character_frequency_map"]),
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    db.add(db_string)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise StringAlreadyExistsError(value)
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(db_string)
    return db_string


def get_string_record(db: Session, value: str) -> Optional[StringRecord]:
    """Get a record by its exact original value"""
    return db.get(StringRecord, value)


def list_string_records(db: Session, filters: Optional[FilterSet] = None) -> List[StringRecord]:
    """Get all records matching every constraint in ``filters``"""
    query = db.query(StringRecord)
    if filters is not None:
        query = apply_filters(query, filters)
    return query.order_by(StringRecord.created_at).all()


def delete_string_record(db: Session, value: str) -> bool:
    """Delete a record by value; False when nothing matched"""
    try:
        deleted = db.query(StringRecord).filter(StringRecord.value == value).delete(
            synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return deleted > 0

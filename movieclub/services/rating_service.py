"""
Rating Service - one score per (person, entry), written with an upsert

Scores are validated by the request schema; upsert() checks the range
again so nothing outside 0-10 ever reaches the database.
"""
import math
import uuid
from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from movieclub.errors import InvalidInputError, storage_error
from movieclub.models.person import Person
from movieclub.models.rating import MAX_SCORE, MIN_SCORE, Rating

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def validate_score(score: float) -> float:
    """Reject NaN and anything outside [0, 10]"""
    if score is None or math.isnan(score) or not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidInputError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")
    return float(score)


class RatingService:
    """Service for rating operations"""

    @staticmethod
    def upsert(db: Session, person_id: uuid.UUID, entry_id: uuid.UUID, score: float) -> Rating:
        """
        Create the rating for (person, entry) or overwrite its score.

        The database resolves the conflict on the (person_id, entry_id)
        unique constraint and refreshes updated_at, so concurrent submits
        for the same pair leave exactly one row.

        Raises:
            InvalidInputError: score outside 0-10
            StorageError: database failure (including unknown person/entry)
        """
        score = validate_score(score)
        now = datetime.now(timezone.utc)

        try:
            insert = _INSERTS[db.get_bind().dialect.name]
        except KeyError:
            raise storage_error("upsert rating", RuntimeError(
                f"unsupported database dialect: {db.get_bind().dialect.name}"
            ))

        stmt = insert(Rating).values(
            id=uuid.uuid4(),
            person_id=person_id,
            entry_id=entry_id,
            score=score,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Rating.person_id, Rating.entry_id],
            set_={"score": stmt.excluded.score, "updated_at": stmt.excluded.updated_at},
        )

        try:
            db.execute(stmt)
            db.commit()
            rating = db.scalars(
                select(Rating)
                .options(joinedload(Rating.person))
                .where(Rating.person_id == person_id, Rating.entry_id == entry_id)
            ).one()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("upsert rating", e) from e

        logger.debug(f"Saved rating {score} for person {person_id} on entry {entry_id}")
        return rating

    @staticmethod
    def get(db: Session, person_id: uuid.UUID, entry_id: uuid.UUID) -> Optional[Rating]:
        try:
            return db.scalars(
                select(Rating).where(Rating.person_id == person_id, Rating.entry_id == entry_id)
            ).first()
        except SQLAlchemyError as e:
            raise storage_error("get rating", e) from e

    @staticmethod
    def list_for_entry(db: Session, entry_id: uuid.UUID) -> List[Rating]:
        """Ratings of one entry, ordered by person code"""
        try:
            return list(db.scalars(
                select(Rating)
                .join(Person, Rating.person_id == Person.id)
                .options(joinedload(Rating.person))
                .where(Rating.entry_id == entry_id)
                .order_by(Person.code)
            ))
        except SQLAlchemyError as e:
            raise storage_error("get ratings by entry id", e) from e

    @staticmethod
    def delete(db: Session, person_id: uuid.UUID, entry_id: uuid.UUID) -> None:
        """Remove a rating. Nothing happens if it does not exist."""
        try:
            db.execute(
                delete(Rating).where(Rating.person_id == person_id, Rating.entry_id == entry_id)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("delete rating", e) from e

    @staticmethod
    def average_for_entry(db: Session, entry_id: uuid.UUID) -> Optional[float]:
        """Mean score for an entry. None (not 0.0) when it has no ratings."""
        try:
            avg = db.scalar(select(func.avg(Rating.score)).where(Rating.entry_id == entry_id))
        except SQLAlchemyError as e:
            raise storage_error("get average for entry", e) from e
        return float(avg) if avg is not None else None

"""
Entry Service - placement of movies into numbered watch groups

An entry is unique per (movie, group). Adding a movie that is already in
the group returns the existing entry instead of failing, so double-submits
and concurrent adds converge on one row.
"""
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.attributes import set_committed_value

from movieclub.errors import EntryConflictError, storage_error
from movieclub.models.entry import Entry
from movieclub.models.person import Person
from movieclub.models.rating import Rating

logger = logging.getLogger(__name__)

DEFAULT_GROUP = 1


# ==================== PICKED-BY CHANGES ====================

@dataclass(frozen=True)
class KeepPicker:
    """Leave the picked-by person as it is."""


@dataclass(frozen=True)
class ClearPicker:
    """Remove the picked-by person."""


@dataclass(frozen=True)
class SetPicker:
    """Set the picked-by person."""
    person_id: uuid.UUID


PickerChange = Union[KeepPicker, ClearPicker, SetPicker]


@dataclass(frozen=True)
class EntryChanges:
    """Partial update for an entry. None means "leave unchanged"."""
    group_number: Optional[int] = None
    notes: Optional[str] = None
    picked_by: PickerChange = field(default_factory=KeepPicker)


class EntryService:
    """Service for entry operations"""

    @staticmethod
    def create(
        db: Session,
        movie_id: uuid.UUID,
        group_number: int,
        notes: Optional[str] = None,
        picked_by_person_id: Optional[uuid.UUID] = None,
    ) -> Entry:
        """
        Place a movie into a group.

        Inserts first and lets the unique constraint decide. On a duplicate
        (movie, group) the existing entry is returned unchanged.

        Raises:
            StorageError: insert failed for any other reason (e.g. unknown movie)
        """
        entry = Entry(
            movie_id=movie_id,
            group_number=group_number,
            notes=notes,
            picked_by_person_id=picked_by_person_id,
        )
        try:
            db.add(entry)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            existing = EntryService.get_by_movie_and_group(db, movie_id, group_number)
            if existing is None:
                raise storage_error("create entry", e) from e
            logger.debug(f"Movie {movie_id} already in group {group_number}, returning existing entry")
            return existing
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("create entry", e) from e

        db.refresh(entry)
        logger.info(f"Added movie {movie_id} to group {group_number}")
        return entry

    @staticmethod
    def get_by_id(db: Session, entry_id: uuid.UUID) -> Optional[Entry]:
        """Entry with its movie, picker and ratings (ordered by person code)"""
        try:
            entry = db.scalars(
                select(Entry)
                .options(joinedload(Entry.movie), joinedload(Entry.picked_by))
                .where(Entry.id == entry_id)
            ).first()
            if entry is None:
                return None
            EntryService._attach_ratings(db, [entry])
            return entry
        except SQLAlchemyError as e:
            raise storage_error("get entry by id", e) from e

    @staticmethod
    def get_by_movie_and_group(db: Session, movie_id: uuid.UUID, group_number: int) -> Optional[Entry]:
        try:
            return db.scalars(
                select(Entry).where(Entry.movie_id == movie_id, Entry.group_number == group_number)
            ).first()
        except SQLAlchemyError as e:
            raise storage_error("get entry by movie and group", e) from e

    @staticmethod
    def _ratings_for_entries(db: Session, entry_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[Rating]]:
        """
        Ratings for many entries in a single query, grouped by entry id.
        Each list is ordered by person code.
        """
        ratings_by_entry: Dict[uuid.UUID, List[Rating]] = defaultdict(list)
        entry_ids = list(entry_ids)
        if not entry_ids:
            return ratings_by_entry

        rows = db.scalars(
            select(Rating)
            .join(Person, Rating.person_id == Person.id)
            .options(joinedload(Rating.person))
            .where(Rating.entry_id.in_(entry_ids))
            .order_by(Rating.entry_id, Person.code)
        )
        for rating in rows:
            ratings_by_entry[rating.entry_id].append(rating)
        return ratings_by_entry

    @staticmethod
    def _attach_ratings(db: Session, entries: List[Entry]) -> None:
        ratings_by_entry = EntryService._ratings_for_entries(db, [e.id for e in entries])
        for entry in entries:
            # Populate the relationship without triggering a per-entry lazy load
            set_committed_value(entry, "ratings", ratings_by_entry.get(entry.id, []))

    @staticmethod
    def list_by_group(db: Session, group_number: int) -> List[Entry]:
        """Entries of a group, most recently added first, with movie and ratings"""
        try:
            entries = list(db.scalars(
                select(Entry)
                .options(joinedload(Entry.movie), joinedload(Entry.picked_by))
                .where(Entry.group_number == group_number)
                .order_by(Entry.added_at.desc())
            ))
            EntryService._attach_ratings(db, entries)
            return entries
        except SQLAlchemyError as e:
            raise storage_error("list entries by group", e) from e

    @staticmethod
    def list_group_numbers(db: Session) -> List[int]:
        """Distinct group numbers in ascending order"""
        try:
            return list(db.scalars(
                select(Entry.group_number).distinct().order_by(Entry.group_number)
            ))
        except SQLAlchemyError as e:
            raise storage_error("list groups", e) from e

    @staticmethod
    def current_group(db: Session) -> int:
        """Highest group number in use, or 1 when there are no entries"""
        try:
            return db.scalar(select(func.coalesce(func.max(Entry.group_number), DEFAULT_GROUP)))
        except SQLAlchemyError as e:
            raise storage_error("get current group", e) from e

    @staticmethod
    def update(db: Session, entry_id: uuid.UUID, changes: EntryChanges) -> Optional[Entry]:
        """
        Apply a partial update. Returns the refreshed entry, or None if it does not exist.

        Raises:
            EntryConflictError: the movie is already in the target group
        """
        try:
            entry = db.get(Entry, entry_id)
        except SQLAlchemyError as e:
            raise storage_error("update entry", e) from e
        if entry is None:
            return None

        if changes.group_number is not None:
            entry.group_number = changes.group_number
        if changes.notes is not None:
            entry.notes = changes.notes or None

        if isinstance(changes.picked_by, ClearPicker):
            entry.picked_by_person_id = None
        elif isinstance(changes.picked_by, SetPicker):
            entry.picked_by_person_id = changes.picked_by.person_id

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if changes.group_number is not None and EntryService.get_by_movie_and_group(
                db, entry.movie_id, changes.group_number
            ):
                raise EntryConflictError(
                    f"Movie is already in group {changes.group_number}", original_error=e
                ) from e
            raise storage_error("update entry", e) from e
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("update entry", e) from e

        return EntryService.get_by_id(db, entry_id)

    @staticmethod
    def set_watched(db: Session, entry_id: uuid.UUID, watched_at: datetime) -> Optional[Entry]:
        """Mark an entry as watched on the given date. Other fields are untouched."""
        return EntryService._set_watched_at(db, entry_id, watched_at, "set watched date")

    @staticmethod
    def clear_watched(db: Session, entry_id: uuid.UUID) -> Optional[Entry]:
        """Mark an entry as not yet watched"""
        return EntryService._set_watched_at(db, entry_id, None, "clear watched date")

    @staticmethod
    def _set_watched_at(db: Session, entry_id: uuid.UUID, watched_at: Optional[datetime],
                        operation: str) -> Optional[Entry]:
        try:
            entry = db.get(Entry, entry_id)
            if entry is None:
                return None
            entry.watched_at = watched_at
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error(operation, e) from e
        return EntryService.get_by_id(db, entry_id)

    @staticmethod
    def delete(db: Session, entry_id: uuid.UUID) -> None:
        """Remove an entry and its ratings. Deleting a missing entry is a no-op."""
        try:
            entry = db.get(Entry, entry_id)
            if entry is None:
                return
            db.delete(entry)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("delete entry", e) from e
        logger.info(f"Deleted entry {entry_id}")

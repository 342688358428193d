"""
Entry tests: group placement, uniqueness, partial updates and watched state
"""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from movieclub.errors import EntryConflictError, StorageError
from movieclub.models.entry import Entry
from movieclub.services.entry_service import (
    ClearPicker,
    EntryChanges,
    EntryService,
    SetPicker,
)
from movieclub.services.rating_service import RatingService

from conftest import make_entry, make_movie


def entry_count(db):
    return db.scalar(select(func.count()).select_from(Entry))


# ============================================
# create
# ============================================

def test_create_same_movie_and_group_returns_existing(db_session):
    movie = make_movie(db_session)

    first = EntryService.create(db_session, movie.id, 3)
    second = EntryService.create(db_session, movie.id, 3)

    assert first.id == second.id
    assert entry_count(db_session) == 1


def test_same_movie_in_two_groups(db_session):
    movie = make_movie(db_session)

    first = EntryService.create(db_session, movie.id, 1)
    second = EntryService.create(db_session, movie.id, 2)

    assert first.id != second.id
    assert entry_count(db_session) == 2


def test_create_with_unknown_movie_is_storage_error(db_session):
    with pytest.raises(StorageError):
        EntryService.create(db_session, uuid.uuid4(), 1)


def test_create_keeps_notes_and_picker(db_session, persons):
    movie = make_movie(db_session)

    entry = EntryService.create(db_session, movie.id, 1, notes="Friday", picked_by_person_id=persons["J"].id)

    assert entry.notes == "Friday"
    assert entry.picked_by_person_id == persons["J"].id
    assert entry.watched_at is None


# ============================================
# queries
# ============================================

def test_list_by_group_newest_first_with_sorted_ratings(db_session, persons):
    older = make_entry(db_session, make_movie(db_session, tmdb_id=1, title="A"), 1, minutes_after=0)
    newer = make_entry(db_session, make_movie(db_session, tmdb_id=2, title="B"), 1, minutes_after=5)
    make_entry(db_session, make_movie(db_session, tmdb_id=3, title="C"), 2)
    RatingService.upsert(db_session, persons["J"].id, older.id, 6.0)
    RatingService.upsert(db_session, persons["A"].id, older.id, 9.0)
    RatingService.upsert(db_session, persons["D"].id, older.id, 7.0)

    entries = EntryService.list_by_group(db_session, 1)

    assert [e.id for e in entries] == [newer.id, older.id]
    assert [r.person.code for r in entries[1].ratings] == ["A", "D", "J"]
    assert entries[0].ratings == []
    assert entries[1].movie.title == "A"


def test_get_by_id_missing_returns_none(db_session):
    assert EntryService.get_by_id(db_session, uuid.uuid4()) is None


def test_group_numbers_and_current_group(db_session):
    assert EntryService.list_group_numbers(db_session) == []
    assert EntryService.current_group(db_session) == 1

    movie = make_movie(db_session)
    make_entry(db_session, movie, 4)
    make_entry(db_session, movie, 2)
    make_entry(db_session, movie, 7)

    assert EntryService.list_group_numbers(db_session) == [2, 4, 7]
    assert EntryService.current_group(db_session) == 7


# ============================================
# update
# ============================================

def test_update_only_changes_given_fields(db_session, persons):
    movie = make_movie(db_session)
    entry = make_entry(db_session, movie, 1, notes="keep me", picked_by_person_id=persons["D"].id)

    updated = EntryService.update(db_session, entry.id, EntryChanges(group_number=2))

    assert updated.group_number == 2
    assert updated.notes == "keep me"
    assert updated.picked_by_person_id == persons["D"].id


def test_update_picker_set_and_clear(db_session, persons):
    entry = make_entry(db_session, make_movie(db_session), 1)

    updated = EntryService.update(db_session, entry.id, EntryChanges(picked_by=SetPicker(persons["C"].id)))
    assert updated.picked_by.code == "C"

    updated = EntryService.update(db_session, entry.id, EntryChanges(picked_by=ClearPicker()))
    assert updated.picked_by_person_id is None


def test_update_empty_notes_clears_them(db_session):
    entry = make_entry(db_session, make_movie(db_session), 1, notes="old")

    updated = EntryService.update(db_session, entry.id, EntryChanges(notes=""))

    assert updated.notes is None


def test_update_into_group_with_same_movie_conflicts(db_session):
    movie = make_movie(db_session)
    make_entry(db_session, movie, 1)
    entry = make_entry(db_session, movie, 2, minutes_after=1)

    with pytest.raises(EntryConflictError):
        EntryService.update(db_session, entry.id, EntryChanges(group_number=1))

    db_session.expire_all()
    assert EntryService.get_by_id(db_session, entry.id).group_number == 2


def test_update_missing_entry_returns_none(db_session):
    assert EntryService.update(db_session, uuid.uuid4(), EntryChanges(group_number=2)) is None


# ============================================
# watched / delete
# ============================================

def test_set_and_clear_watched(db_session):
    entry = make_entry(db_session, make_movie(db_session), 1, notes="n")
    watched_at = datetime(2024, 3, 1, tzinfo=timezone.utc)

    updated = EntryService.set_watched(db_session, entry.id, watched_at)
    assert updated.is_watched
    assert updated.watched_at.date() == watched_at.date()
    assert updated.notes == "n"

    cleared = EntryService.clear_watched(db_session, entry.id)
    assert not cleared.is_watched


def test_set_watched_missing_entry_returns_none(db_session):
    assert EntryService.set_watched(db_session, uuid.uuid4(), datetime.now(timezone.utc)) is None


def test_delete_removes_ratings_and_is_idempotent(db_session, persons):
    from movieclub.models.rating import Rating

    entry = make_entry(db_session, make_movie(db_session), 1)
    RatingService.upsert(db_session, persons["D"].id, entry.id, 5.0)

    EntryService.delete(db_session, entry.id)
    EntryService.delete(db_session, entry.id)

    assert entry_count(db_session) == 0
    assert db_session.scalar(select(func.count()).select_from(Rating)) == 0

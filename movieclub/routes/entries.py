"""
Entry Routes - movies placed in watch groups
"""

import uuid
from datetime import datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from movieclub.database import get_db
from movieclub.schemas.dashboard import GroupResponse
from movieclub.schemas.entry import EntryResponse, EntryUpdate, WatchedUpdate
from movieclub.services.entry_service import EntryService, SetPicker
from movieclub.services.person_service import PersonService
from movieclub.utils.dependencies import require_auth

router = APIRouter(prefix="/api/entries", tags=["Entries"], dependencies=[Depends(require_auth)])
group_router = APIRouter(prefix="/api/groups", tags=["Entries"], dependencies=[Depends(require_auth)])


def _entry_or_404(entry):
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry


# ==================== GROUP ENDPOINTS ====================

@group_router.get("/{group_number}", response_model=GroupResponse)
def get_group(group_number: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Entries of one group, most recently added first"""
    person_count = PersonService.count(db)
    entries = EntryService.list_by_group(db, group_number)
    return GroupResponse(
        number=group_number,
        entries=[EntryResponse.from_entry(e, person_count) for e in entries],
    )


# ==================== ENTRY ENDPOINTS ====================

@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(entry_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    entry = _entry_or_404(EntryService.get_by_id(db, entry_id))
    return EntryResponse.from_entry(entry, PersonService.count(db))


@router.patch("/{entry_id}", response_model=EntryResponse)
def update_entry(payload: EntryUpdate, entry_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    """
    Partially update an entry

    - **group_number**: move to another group (409 if the movie is already there)
    - **notes**: replace notes, "" clears them
    - **picked_by_person_id**: omit to keep, "" or null to clear, a person id to set
    """
    changes = payload.to_changes()
    if isinstance(changes.picked_by, SetPicker):
        if PersonService.get_by_id(db, changes.picked_by.person_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")

    entry = _entry_or_404(EntryService.update(db, entry_id, changes))
    return EntryResponse.from_entry(entry, PersonService.count(db))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    """Remove an entry and its ratings. The movie stays in the library."""
    EntryService.delete(db, entry_id)


@router.post("/{entry_id}/watched", response_model=EntryResponse)
def mark_watched(
    entry_id: uuid.UUID = Path(...),
    payload: Optional[WatchedUpdate] = None,
    db: Session = Depends(get_db),
):
    """Mark an entry as watched. Without a date, today (UTC) is used."""
    watched_on = payload.watched_at if payload and payload.watched_at else datetime.now(timezone.utc).date()
    watched_at = datetime.combine(watched_on, time.min, tzinfo=timezone.utc)

    entry = _entry_or_404(EntryService.set_watched(db, entry_id, watched_at))
    return EntryResponse.from_entry(entry, PersonService.count(db))


@router.delete("/{entry_id}/watched", response_model=EntryResponse)
def clear_watched(entry_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    entry = _entry_or_404(EntryService.clear_watched(db, entry_id))
    return EntryResponse.from_entry(entry, PersonService.count(db))

"""
Rating Routes - API endpoints for scoring entries
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from movieclub.database import get_db
from movieclub.schemas.entry import EntryResponse
from movieclub.schemas.rating import ExistingRating, RatingCreate
from movieclub.services.entry_service import EntryService
from movieclub.services.person_service import PersonService
from movieclub.services.rating_service import RatingService
from movieclub.utils.dependencies import require_auth

router = APIRouter(prefix="/api/ratings", tags=["Ratings"], dependencies=[Depends(require_auth)])


# ==================== RATING CRUD ENDPOINTS ====================

@router.post("", response_model=EntryResponse)
def add_or_update_rating(rating_data: RatingCreate, db: Session = Depends(get_db)):
    """
    Add a new rating or update the existing one

    - **person_id**: person giving the score (required)
    - **entry_id**: entry being rated (required)
    - **score**: value from 0.0 to 10.0 (required)

    Returns the entry with its refreshed ratings and average.
    """
    if EntryService.get_by_id(db, rating_data.entry_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    if PersonService.get_by_id(db, rating_data.person_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")

    RatingService.upsert(db, rating_data.person_id, rating_data.entry_id, rating_data.score)

    entry = EntryService.get_by_id(db, rating_data.entry_id)
    return EntryResponse.from_entry(entry, PersonService.count(db))


@router.get("/{entry_id}/{person_id}", response_model=ExistingRating)
def get_rating(
    entry_id: uuid.UUID = Path(...),
    person_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
):
    """
    A person's current score for an entry

    Returns null values if the person hasn't rated it yet.
    Useful for pre-filling the rating widget.
    """
    rating = RatingService.get(db, person_id, entry_id)
    if rating is None:
        return ExistingRating()
    return ExistingRating(score=rating.score, band=rating.band)


@router.delete("/{entry_id}/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rating(
    entry_id: uuid.UUID = Path(...),
    person_id: uuid.UUID = Path(...),
    db: Session = Depends(get_db),
):
    """Remove a rating. Removing a rating that doesn't exist is not an error."""
    RatingService.delete(db, person_id, entry_id)

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from movieclub.models.entry import Entry
from movieclub.schemas.movie import MovieResponse
from movieclub.schemas.person import PersonResponse
from movieclub.schemas.rating import RatingResponse
from movieclub.services.entry_service import (
    ClearPicker,
    EntryChanges,
    KeepPicker,
    PickerChange,
    SetPicker,
)


class EntryUpdate(BaseModel):
    """
    Schema for updating an entry. Omitted fields are left unchanged.

    - **group_number**: move the entry to another group
    - **notes**: replace notes ("" clears them)
    - **picked_by_person_id**: omit to keep, "" or null to clear, a person id to set
    """
    group_number: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=2000)
    picked_by_person_id: Optional[str] = None

    @field_validator('notes')
    @classmethod
    def strip_notes(cls, v):
        # Stored verbatim
        return v.strip() if v is not None else v

    @field_validator('picked_by_person_id')
    @classmethod
    def validate_person_id(cls, v):
        if v:
            try:
                uuid.UUID(v)
            except ValueError:
                raise ValueError('Invalid person ID')
        return v

    def picker_change(self) -> PickerChange:
        if 'picked_by_person_id' not in self.model_fields_set:
            return KeepPicker()
        if not self.picked_by_person_id:
            return ClearPicker()
        return SetPicker(uuid.UUID(self.picked_by_person_id))

    def to_changes(self) -> EntryChanges:
        return EntryChanges(
            group_number=self.group_number,
            notes=self.notes,
            picked_by=self.picker_change(),
        )


class WatchedUpdate(BaseModel):
    """Schema for marking an entry watched. Defaults to today."""
    watched_at: Optional[date] = None


class EntryResponse(BaseModel):
    """Schema for an entry with its movie and ratings"""
    id: uuid.UUID
    movie_id: uuid.UUID
    group_number: int
    watched_at: Optional[datetime] = None
    added_at: datetime
    notes: Optional[str] = None
    is_watched: bool
    picked_by: Optional[PersonResponse] = None
    movie: MovieResponse
    ratings: List[RatingResponse] = []
    rating_count: int = 0
    average_rating: Optional[float] = None
    fully_rated: bool = False

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entry(cls, entry: Entry, person_count: int) -> "EntryResponse":
        response = cls.model_validate(entry)
        response.fully_rated = entry.is_fully_rated(person_count)
        return response

"""
Rating Schemas - Pydantic models for rating request/response validation
"""

import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional

from movieclub.models.rating import MAX_SCORE, MIN_SCORE
from movieclub.schemas.person import PersonResponse


class RatingCreate(BaseModel):
    """Schema for creating/updating a rating"""
    person_id: uuid.UUID = Field(..., description="Person giving the rating")
    entry_id: uuid.UUID = Field(..., description="Entry being rated")
    score: float = Field(..., description="Rating value (0-10)", ge=MIN_SCORE, le=MAX_SCORE)

    @field_validator('score')
    @classmethod
    def validate_score(cls, v):
        """Ensure score is within valid range"""
        if v != v or v < MIN_SCORE or v > MAX_SCORE:
            raise ValueError('Score must be between 0.0 and 10.0')
        return v


class RatingResponse(BaseModel):
    """Schema for rating response"""
    id: uuid.UUID
    person_id: uuid.UUID
    entry_id: uuid.UUID
    score: float
    band: str = Field(..., description="low / mid / high")
    person: Optional[PersonResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExistingRating(BaseModel):
    """
    A person's current score for an entry, or nulls if they haven't rated it.
    Used to pre-fill the rating widget.
    """
    score: Optional[float] = None
    band: Optional[str] = None

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MovieAdd(BaseModel):
    """Schema for adding a TMDB movie to a group"""
    tmdb_id: int = Field(..., description="TMDB movie ID", gt=0)
    group_number: Optional[int] = Field(
        None, ge=1, description="Target group, defaults to the current group"
    )


class MovieUpdate(BaseModel):
    """Schema for correcting stored movie details"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    release_year: Optional[int] = Field(None, ge=1870, le=2100)
    poster_url: Optional[str] = Field(None, max_length=500)
    synopsis: Optional[str] = Field(None, max_length=5000)
    runtime_minutes: Optional[int] = Field(None, ge=0, le=1000)
    imdb_id: Optional[str] = Field(None, max_length=20)


class MovieResponse(BaseModel):
    """Schema for a library movie (raw TMDB metadata is not exposed)"""
    id: uuid.UUID
    title: str
    release_year: Optional[int] = None
    poster_url: Optional[str] = None
    synopsis: Optional[str] = None
    runtime_minutes: Optional[int] = None
    formatted_runtime: str = ""
    tmdb_id: Optional[int] = None
    imdb_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CatalogSearchResult(BaseModel):
    """One TMDB search hit"""
    id: int
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[str] = None
    release_year: Optional[int] = None
    poster_url: Optional[str] = None
    vote_average: Optional[float] = None

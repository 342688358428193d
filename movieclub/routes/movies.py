import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from movieclub.database import get_db
from movieclub.errors import InvalidInputError
from movieclub.schemas.entry import EntryResponse
from movieclub.schemas.movie import CatalogSearchResult, MovieAdd, MovieResponse, MovieUpdate
from movieclub.schemas.validation import SearchQuerySchema
from movieclub.services.entry_service import EntryService
from movieclub.services.movie_service import MovieService
from movieclub.services.person_service import PersonService
from movieclub.services.tmdb_service import TMDBService, poster_url, release_year
from movieclub.utils.dependencies import get_tmdb_service, require_auth

router = APIRouter(prefix="/api/movies", tags=["Movies"], dependencies=[Depends(require_auth)])


# ============================================
# Catalog search
# ============================================

@router.get("/search", response_model=List[CatalogSearchResult])
def search_movies(
    q: str = Query(..., min_length=1, max_length=200, description="Search query"),
    tmdb: TMDBService = Depends(get_tmdb_service),
):
    """
    Search TMDB by title

    Returns the first page of results. Nothing is stored.
    """
    try:
        search = SearchQuerySchema(query=q)
    except ValidationError as e:
        raise InvalidInputError("Invalid search query", original_error=e) from e

    return [
        CatalogSearchResult(
            id=hit["id"],
            title=hit.get("title") or "",
            overview=hit.get("overview"),
            release_date=hit.get("release_date"),
            release_year=release_year(hit.get("release_date")),
            poster_url=poster_url(hit.get("poster_path")),
            vote_average=hit.get("vote_average"),
        )
        for hit in tmdb.search(search.query)
        if hit.get("id") is not None
    ]


# ============================================
# Library
# ============================================

@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
def add_movie(
    payload: MovieAdd,
    db: Session = Depends(get_db),
    tmdb: TMDBService = Depends(get_tmdb_service),
):
    """
    Add a TMDB movie to a group

    - **tmdb_id**: TMDB movie ID (required)
    - **group_number**: target group (defaults to the current group)

    The movie is fetched from TMDB only the first time it is added.
    Adding a movie that is already in the group returns the existing entry.
    """
    movie = MovieService.get_or_create_by_tmdb_id(db, payload.tmdb_id, tmdb.get_movie)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found on TMDB")

    group_number = payload.group_number or EntryService.current_group(db)
    entry = EntryService.create(db, movie.id, group_number)
    entry = EntryService.get_by_id(db, entry.id)
    return EntryResponse.from_entry(entry, PersonService.count(db))


@router.get("", response_model=List[MovieResponse])
def list_movies(db: Session = Depends(get_db)):
    """All library movies ordered by title"""
    return MovieService.list_all(db)


@router.get("/{movie_id}", response_model=MovieResponse)
def get_movie(movie_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    movie = MovieService.get_by_id(db, movie_id)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    return movie


@router.patch("/{movie_id}", response_model=MovieResponse)
def update_movie(payload: MovieUpdate, movie_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    """Correct stored movie details. Omitted fields are left unchanged."""
    movie = MovieService.update(db, movie_id, **payload.model_dump(exclude_unset=True))
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    return movie


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movie(movie_id: uuid.UUID = Path(...), db: Session = Depends(get_db)):
    """Delete a movie together with all of its entries and ratings"""
    MovieService.delete(db, movie_id)

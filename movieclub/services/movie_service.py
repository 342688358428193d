"""
Movie Service - canonical movie records, deduplicated by TMDB id
"""
import uuid
from typing import Any, Callable, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from movieclub.errors import InvalidInputError, storage_error
from movieclub.models.movie import Movie
from movieclub.services.tmdb_service import poster_url, release_year

logger = logging.getLogger(__name__)

# Editable through MovieService.update; tmdb_id is the dedup key and stays fixed
UPDATABLE_FIELDS = ("title", "release_year", "poster_url", "synopsis",
                    "runtime_minutes", "imdb_id", "metadata_json")


def movie_fields_from_details(tmdb_id: int, details: Dict[str, Any]) -> Dict[str, Any]:
    """Map a TMDB detail payload onto Movie columns."""
    return {
        "tmdb_id": tmdb_id,
        "title": details.get("title") or "Unknown",
        "release_year": release_year(details.get("release_date")),
        "poster_url": poster_url(details.get("poster_path")),
        "synopsis": details.get("overview"),
        "runtime_minutes": details.get("runtime"),
        "imdb_id": details.get("imdb_id") or None,
        "metadata_json": details,
    }


class MovieService:
    """Service for movie library operations"""

    @staticmethod
    def get_by_id(db: Session, movie_id: uuid.UUID) -> Optional[Movie]:
        try:
            return db.get(Movie, movie_id)
        except SQLAlchemyError as e:
            raise storage_error("get movie by id", e) from e

    @staticmethod
    def get_by_tmdb_id(db: Session, tmdb_id: int) -> Optional[Movie]:
        try:
            return db.scalars(select(Movie).where(Movie.tmdb_id == tmdb_id)).first()
        except SQLAlchemyError as e:
            raise storage_error("get movie by tmdb id", e) from e

    @staticmethod
    def list_all(db: Session) -> List[Movie]:
        """All movies ordered by title"""
        try:
            return list(db.scalars(select(Movie).order_by(Movie.title)))
        except SQLAlchemyError as e:
            raise storage_error("list movies", e) from e

    @staticmethod
    def get_or_create_by_tmdb_id(
        db: Session,
        tmdb_id: int,
        fetch_details: Callable[[int], Optional[Dict[str, Any]]],
    ) -> Optional[Movie]:
        """
        Return the library movie for a TMDB id, fetching and storing it on first use.

        An existing record is returned as-is: no second fetch, no refresh.
        If a concurrent request inserts the same TMDB id first, the unique
        constraint rejects our insert and the winner's row is returned.

        Args:
            db: Database session
            tmdb_id: TMDB movie ID
            fetch_details: Callable returning the TMDB detail payload, or None
                when TMDB does not know the id

        Returns:
            Movie, or None when TMDB reports the movie does not exist

        Raises:
            CatalogUnavailableError: fetch_details failed
            StorageError: database failure
        """
        existing = MovieService.get_by_tmdb_id(db, tmdb_id)
        if existing:
            return existing

        details = fetch_details(tmdb_id)
        if details is None:
            logger.info(f"TMDB has no movie with id {tmdb_id}")
            return None

        new_movie = Movie(**movie_fields_from_details(tmdb_id, details))
        try:
            db.add(new_movie)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            winner = MovieService.get_by_tmdb_id(db, tmdb_id)
            if winner is None:
                raise storage_error("create movie", e) from e
            logger.info(f"Movie with tmdb_id {tmdb_id} was created concurrently, reusing it")
            return winner
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("create movie", e) from e

        db.refresh(new_movie)
        logger.info(f"Added movie '{new_movie.title}' (tmdb_id={tmdb_id})")
        return new_movie

    @staticmethod
    def update(db: Session, movie_id: uuid.UUID, **changes: Any) -> Optional[Movie]:
        """
        Partial update. Only keyword arguments that are not None are applied.
        Returns None when the movie does not exist.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Cannot update movie fields: {', '.join(sorted(unknown))}")

        movie = MovieService.get_by_id(db, movie_id)
        if movie is None:
            return None

        for field, value in changes.items():
            if value is not None:
                setattr(movie, field, value)

        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("update movie", e) from e
        db.refresh(movie)
        return movie

    @staticmethod
    def delete(db: Session, movie_id: uuid.UUID) -> None:
        """Delete a movie. Its entries (and their ratings) go with it."""
        movie = MovieService.get_by_id(db, movie_id)
        if movie is None:
            return
        try:
            db.delete(movie)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise storage_error("delete movie", e) from e

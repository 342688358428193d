from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from movieclub.config import Settings
from movieclub.errors import CatalogUnavailableError
from movieclub.main import create_app
from movieclub.migrations.create_all_tables import create_tables, seed_persons
from movieclub.models.entry import Entry
from movieclub.models.movie import Movie
from movieclub.services.person_service import PersonService
from movieclub.utils.dependencies import get_tmdb_service

API_TOKEN = "test-api-token"

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeCatalog:
    """Stand-in for TMDBService that records every detail fetch."""

    def __init__(self):
        self.movies = {}
        self.search_results = []
        self.fetches = []
        self.fail = False

    def add(self, tmdb_id, title, release_date="2010-07-16", runtime=148, **extra):
        self.movies[tmdb_id] = {
            "id": tmdb_id,
            "title": title,
            "release_date": release_date,
            "runtime": runtime,
            "overview": f"Overview of {title}",
            "poster_path": f"/poster{tmdb_id}.jpg",
            "imdb_id": f"tt{tmdb_id:07d}",
            **extra,
        }

    def get_movie(self, tmdb_id):
        self.fetches.append(tmdb_id)
        if self.fail:
            raise CatalogUnavailableError("TMDB API error: 503", status_code=503)
        return self.movies.get(tmdb_id)

    def search(self, query):
        if self.fail:
            raise CatalogUnavailableError("TMDB API error: 503", status_code=503)
        return self.search_results


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        api_token=API_TOKEN,
        tmdb_api_key="test-tmdb-key",
        secure_cookies=False,
    )


@pytest.fixture
def app(settings):
    """Fresh application backed by its own in-memory database."""
    app = create_app(settings)
    create_tables(app.state.engine)
    yield app
    app.dependency_overrides.clear()
    app.state.engine.dispose()


@pytest.fixture
def db_session(app):
    """Provide a database session sharing the app's connection."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def persons(db_session, settings):
    """The default roster (D, J, C, A) keyed by code."""
    seed_persons(db_session, settings.persons)
    return PersonService.as_map(db_session)


@pytest.fixture
def catalog(app):
    fake = FakeCatalog()
    app.dependency_overrides[get_tmdb_service] = lambda: fake
    return fake


@pytest.fixture
def client(app, catalog):
    """Unauthenticated test client."""
    return TestClient(app)


@pytest.fixture
def auth_client(app, catalog):
    """Test client sending the API token as a bearer header."""
    return TestClient(app, headers={"Authorization": f"Bearer {API_TOKEN}"})


# ============================================
# Helpers
# ============================================

def make_movie(db, tmdb_id=27205, title="Inception", **fields):
    movie = Movie(tmdb_id=tmdb_id, title=title, **fields)
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie


def make_entry(db, movie, group_number=1, minutes_after=0, **fields):
    """Entry with an explicit added_at so ordering is deterministic."""
    entry = Entry(
        movie_id=movie.id,
        group_number=group_number,
        added_at=BASE_TIME + timedelta(minutes=minutes_after),
        **fields,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry

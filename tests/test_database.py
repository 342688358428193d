import pytest
from sqlalchemy import func, pool, select

from movieclub.config import Settings
from movieclub.database import build_engine, build_session_factory, is_memory_sqlite
from movieclub.migrations.create_all_tables import create_tables
from movieclub.models.movie import Movie


def sqlite_settings(url):
    return Settings(database_url=url, api_token="t", tmdb_api_key="k")


@pytest.mark.parametrize("url, expected", [
    ("sqlite://", True),
    ("sqlite:///:memory:", True),
    ("sqlite:///file:club?mode=memory&cache=shared&uri=true", True),
    ("sqlite:///club.db", False),
    ("sqlite:////var/lib/movieclub/club.db", False),
])
def test_is_memory_sqlite(url, expected):
    assert is_memory_sqlite(url) is expected


def test_memory_database_uses_single_connection():
    engine = build_engine(sqlite_settings("sqlite://"))
    try:
        assert isinstance(engine.pool, pool.StaticPool)
    finally:
        engine.dispose()


def test_file_database_rollback_does_not_undo_other_session(tmp_path):
    """One session rolling back must not discard another session's pending work."""
    engine = build_engine(sqlite_settings(f"sqlite:///{tmp_path / 'club.db'}"))
    create_tables(engine)
    sessions = build_session_factory(engine)

    assert not isinstance(engine.pool, pool.StaticPool)

    writer = sessions()
    other = sessions()
    try:
        writer.add(Movie(tmdb_id=27205, title="Inception"))
        writer.flush()

        other.scalars(select(Movie)).all()
        other.rollback()

        writer.commit()
    finally:
        writer.close()
        other.close()

    fresh = sessions()
    try:
        assert fresh.scalar(select(func.count()).select_from(Movie)) == 1
    finally:
        fresh.close()
        engine.dispose()

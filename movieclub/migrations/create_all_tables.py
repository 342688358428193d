"""
Migration script to create all database tables and seed the person roster

Run this script to create all database tables:
    python -m movieclub.migrations.create_all_tables

Safe to run repeatedly: existing tables and persons are left in place.
"""

from typing import Iterable, Tuple

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from movieclub.config import Settings
from movieclub.database import Base, build_engine, build_session_factory
# Import all models to ensure they're registered with Base
from movieclub.models import Entry, Movie, Person, Rating  # noqa: F401


def create_tables(engine: Engine) -> None:
    """Create all database tables"""
    Base.metadata.create_all(bind=engine)


def seed_persons(db: Session, roster: Iterable[Tuple[str, str]]) -> int:
    """
    Insert roster persons that are missing and rename changed ones.

    Returns:
        Number of persons inserted
    """
    existing = {p.code: p for p in db.scalars(select(Person))}
    inserted = 0
    for code, name in roster:
        person = existing.get(code)
        if person is None:
            db.add(Person(code=code, name=name))
            inserted += 1
        elif person.name != name:
            person.name = name
    db.commit()
    return inserted


def main() -> None:
    settings = Settings.from_env()
    engine = build_engine(settings)

    print("=" * 60)
    print("Creating all database tables...")
    print("=" * 60)

    try:
        create_tables(engine)
        print("\n✅ All tables created successfully!")
        print("\nTables:")
        for table in Base.metadata.sorted_tables:
            print(f"   - {table.name}")

        db = build_session_factory(engine)()
        try:
            inserted = seed_persons(db, settings.persons)
        finally:
            db.close()
        print(f"\n✅ Roster seeded ({inserted} new, {len(settings.persons)} total)")
        print("=" * 60)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()

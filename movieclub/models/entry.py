import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from movieclub.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(Base):
    """
    A movie placed into a numbered watch group.

    Carries the watched status and the group's ratings for that movie.
    `ratings` is filled in bulk by EntryService so list views cost one
    rating query, not one per entry.
    """
    __tablename__ = "entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    movie_id = Column(Uuid, ForeignKey('movies.id', ondelete='CASCADE'), nullable=False, index=True)
    group_number = Column(Integer, nullable=False, index=True)
    watched_at = Column(DateTime(timezone=True), nullable=True)  # None = not yet watched
    added_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    notes = Column(Text, nullable=True)
    picked_by_person_id = Column(Uuid, ForeignKey('persons.id', ondelete='SET NULL'), nullable=True)

    # Relationships
    movie = relationship("Movie")
    picked_by = relationship("Person")
    ratings = relationship("Rating", back_populates="entry", cascade="all, delete-orphan")

    # Ensure one entry per movie per group
    __table_args__ = (
        UniqueConstraint('movie_id', 'group_number', name='unique_movie_group_entry'),
    )

    @property
    def is_watched(self) -> bool:
        return self.watched_at is not None

    @property
    def rating_count(self) -> int:
        return len(self.ratings)

    @property
    def average_rating(self) -> Optional[float]:
        """Mean score, or None when nobody has rated yet."""
        if not self.ratings:
            return None
        return sum(r.score for r in self.ratings) / len(self.ratings)

    def is_fully_rated(self, person_count: int) -> bool:
        return self.rating_count == person_count

    def rating_for_person(self, person_id: uuid.UUID):
        for rating in self.ratings:
            if rating.person_id == person_id:
                return rating
        return None

    def rating_for_code(self, code: str):
        for rating in self.ratings:
            if rating.person is not None and rating.person.code == code:
                return rating
        return None

    def __repr__(self):
        return f"<Entry(movie_id={self.movie_id}, group_number={self.group_number}, watched={self.is_watched})>"

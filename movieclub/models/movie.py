import uuid

from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, Uuid
from sqlalchemy.sql import func
from movieclub.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    title = Column(String(500), nullable=False)
    release_year = Column(Integer, nullable=True)
    poster_url = Column(String(500), nullable=True)
    synopsis = Column(Text, nullable=True)
    runtime_minutes = Column(Integer, nullable=True)
    tmdb_id = Column(Integer, unique=True, nullable=True, index=True)
    imdb_id = Column(String(20), nullable=True)
    metadata_json = Column(JSON, nullable=True)  # Raw TMDB payload, stored as-is

    @property
    def formatted_runtime(self) -> str:
        """Runtime as "1h 45m", "2h" or "50m". Empty when unknown."""
        if self.runtime_minutes is None:
            return ""
        hours, minutes = divmod(self.runtime_minutes, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours}h"
        return f"{minutes}m"

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}', tmdb_id={self.tmdb_id})>"

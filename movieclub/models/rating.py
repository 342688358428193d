import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Float, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from movieclub.database import Base

MIN_SCORE = 0.0
MAX_SCORE = 10.0


def score_band(score: float) -> str:
    """
    Classify a score for display: "low" below 4, "mid" below 7, else "high".
    """
    if score < 4.0:
        return "low"
    if score < 7.0:
        return "mid"
    return "high"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Rating(Base):
    __tablename__ = "ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id = Column(Uuid, ForeignKey("persons.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_id = Column(Uuid, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Float, nullable=False)  # 0.0 - 10.0
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    person = relationship("Person")
    entry = relationship("Entry", back_populates="ratings")

    # Ensure one rating per person per entry
    __table_args__ = (
        UniqueConstraint('person_id', 'entry_id', name='unique_person_entry_rating'),
    )

    @property
    def band(self) -> str:
        return score_band(self.score)

    def __repr__(self):
        return f"<Rating(person_id={self.person_id}, entry_id={self.entry_id}, score={self.score})>"

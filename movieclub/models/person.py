import uuid

from sqlalchemy import Column, String, Uuid
from movieclub.database import Base


class Person(Base):
    """A member of the group who rates movies. Seeded, never created by requests."""
    __tablename__ = "persons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(8), unique=True, nullable=False, index=True)  # e.g. "D", "J"
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Person(code={self.code}, name={self.name})>"

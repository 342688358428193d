"""
Import all models to ensure they are registered with SQLAlchemy
"""
from movieclub.models.movie import Movie
from movieclub.models.person import Person
from movieclub.models.entry import Entry
from movieclub.models.rating import Rating

__all__ = [
    "Movie",
    "Person",
    "Entry",
    "Rating",
]

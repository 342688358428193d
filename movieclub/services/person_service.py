import uuid
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movieclub.errors import storage_error
from movieclub.models.person import Person


class PersonService:
    """Read-only access to the people who rate movies"""

    @staticmethod
    def list_all(db: Session) -> List[Person]:
        try:
            return list(db.scalars(select(Person).order_by(Person.code)))
        except SQLAlchemyError as e:
            raise storage_error("get all persons", e) from e

    @staticmethod
    def get_by_id(db: Session, person_id: uuid.UUID) -> Optional[Person]:
        try:
            return db.get(Person, person_id)
        except SQLAlchemyError as e:
            raise storage_error("get person by id", e) from e

    @staticmethod
    def get_by_code(db: Session, code: str) -> Optional[Person]:
        try:
            return db.scalars(select(Person).where(Person.code == code)).first()
        except SQLAlchemyError as e:
            raise storage_error("get person by code", e) from e

    @staticmethod
    def as_map(db: Session) -> Dict[str, Person]:
        """All persons keyed by code"""
        return {person.code: person for person in PersonService.list_all(db)}

    @staticmethod
    def count(db: Session) -> int:
        try:
            return db.scalar(select(func.count()).select_from(Person))
        except SQLAlchemyError as e:
            raise storage_error("count persons", e) from e

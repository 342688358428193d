"""
Dashboard Service - best-effort overview of every watch group

Unlike the other services this one degrades instead of failing: a group
whose entries cannot be loaded is logged and left out, and a failed
current-group lookup falls back to group 1.
"""
from dataclasses import dataclass, field
from typing import List
import logging

from sqlalchemy.orm import Session

from movieclub.errors import StorageError
from movieclub.models.entry import Entry
from movieclub.models.person import Person
from movieclub.services.entry_service import DEFAULT_GROUP, EntryService
from movieclub.services.person_service import PersonService

logger = logging.getLogger(__name__)


@dataclass
class GroupListing:
    number: int
    entries: List[Entry] = field(default_factory=list)


@dataclass
class Dashboard:
    groups: List[GroupListing]
    persons: List[Person]
    current_group: int


class DashboardService:
    """Compose the group listings shown on the main page"""

    @staticmethod
    def build(db: Session) -> Dashboard:
        """
        Load all groups (highest number first), the persons, and the current group.

        Raises:
            StorageError: group numbers or persons could not be loaded
        """
        group_numbers = EntryService.list_group_numbers(db)
        persons = PersonService.list_all(db)

        try:
            current_group = EntryService.current_group(db)
        except StorageError as e:
            logger.error(f"Failed to get current group, falling back to {DEFAULT_GROUP}: {e}")
            db.rollback()
            current_group = DEFAULT_GROUP

        groups: List[GroupListing] = []
        for number in group_numbers:
            try:
                entries = EntryService.list_by_group(db, number)
            except StorageError as e:
                logger.error(f"Failed to list entries for group {number}: {e}")
                db.rollback()
                continue
            groups.append(GroupListing(number=number, entries=entries))

        # Most recent round first
        groups.sort(key=lambda g: g.number, reverse=True)

        return Dashboard(groups=groups, persons=persons, current_group=current_group)

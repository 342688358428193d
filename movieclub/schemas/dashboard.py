from typing import List

from pydantic import BaseModel

from movieclub.schemas.entry import EntryResponse
from movieclub.schemas.person import PersonResponse
from movieclub.services.dashboard_service import Dashboard


class GroupResponse(BaseModel):
    number: int
    entries: List[EntryResponse]


class DashboardResponse(BaseModel):
    """Groups are ordered highest number first"""
    groups: List[GroupResponse]
    persons: List[PersonResponse]
    current_group: int

    @classmethod
    def from_dashboard(cls, dashboard: Dashboard) -> "DashboardResponse":
        person_count = len(dashboard.persons)
        return cls(
            groups=[
                GroupResponse(
                    number=group.number,
                    entries=[EntryResponse.from_entry(e, person_count) for e in group.entries],
                )
                for group in dashboard.groups
            ],
            persons=[PersonResponse.model_validate(p) for p in dashboard.persons],
            current_group=dashboard.current_group,
        )

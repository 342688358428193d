"""
Dashboard Routes - the landing view and the rating roster
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from movieclub.database import get_db
from movieclub.schemas.dashboard import DashboardResponse
from movieclub.schemas.person import PersonResponse
from movieclub.services.dashboard_service import DashboardService
from movieclub.services.person_service import PersonService
from movieclub.utils.dependencies import require_auth

router = APIRouter(prefix="/api", tags=["Dashboard"], dependencies=[Depends(require_auth)])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(db: Session = Depends(get_db)):
    """
    Every group with its entries, newest group first

    A group whose entries cannot be loaded is left out rather than failing
    the whole page.
    """
    return DashboardResponse.from_dashboard(DashboardService.build(db))


@router.get("/persons", response_model=List[PersonResponse])
def list_persons(db: Session = Depends(get_db)):
    """All persons ordered by code"""
    return PersonService.list_all(db)

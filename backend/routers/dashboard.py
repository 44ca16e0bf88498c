from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.dashboard import DashboardStats
from crud.dashboard import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardStats)
def read_dashboard(db: Session = Depends(get_db)):
    return get_dashboard_stats(db)

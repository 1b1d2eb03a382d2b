"""Projection endpoints: map aggregation, totals and the recent feed."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.analytics import RecentItem, RegionCounts, TotalStats
from ..services import analytics_service

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/analytics/map", response_model=Dict[str, RegionCounts])
def get_map_data(db: Session = Depends(get_db)):
    """Current-version counts per province ISO code."""
    return analytics_service.map_data(db)


@router.get("/analytics/totals", response_model=TotalStats)
def get_total_stats(db: Session = Depends(get_db)):
    return analytics_service.total_stats(db)


@router.get("/recent", response_model=List[RecentItem])
def get_recent_feed(
    limit: Optional[int] = Query(None, description="Clamped to 1..20, default 8"),
    db: Session = Depends(get_db),
):
    """Newest current versions across all kinds."""
    return analytics_service.recent_feed(db, limit)

"""Projection schemas."""

from typing import Optional

from pydantic import BaseModel


class RegionCounts(BaseModel):
    perpetrators: int = 0
    victims: int = 0
    incidents: int = 0


class TotalStats(BaseModel):
    """Current-version counts per kind."""
    perpetrators: int
    victims: int
    incidents: int


class RecentItem(BaseModel):
    """One entry of the cross-kind recent activity feed."""
    id: str
    kind: str
    title: str
    subtitle: str
    status: Optional[str] = None
    created_at: int

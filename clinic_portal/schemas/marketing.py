"""
Pydantic schemas for marketing analytics responses.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PostSummary(BaseModel):
    """Totals over a platform's posts in the requested window."""
    reactions: float = 0
    comments: float = 0
    shares: float = 0
    impressions: float = 0
    impressions_unique: float = 0
    clicks: float = Field(0, description="clicks + linkclicks")
    engagement: float = 0
    average_engagement: float = 0
    posts_count: int = 0
    posts_this_week: int = 0


class TimelineSummary(BaseModel):
    latest: float
    previous: float
    formatted: str = Field(..., example="12.5K")
    change: str = Field(..., example="+4.2%")
    is_positive: bool


class PlatformMetrics(BaseModel):
    name: str
    display_name: str
    available: bool = Field(..., description="False when Metricool could not be reached for this platform")
    posts: Optional[PostSummary] = None


class OverviewPlatform(BaseModel):
    name: str
    available: bool
    reach: str
    posts_count: int
    posts_this_week: int


class MarketingOverview(BaseModel):
    total_reach: str = Field(..., example="48.3K")
    engagement_rate: str = Field(..., example="3.1%")
    total_posts: int
    platforms: List[OverviewPlatform]


class MarketingOverviewResponse(BaseModel):
    success: bool = True
    overview: MarketingOverview
    platforms: Dict[str, PlatformMetrics]


class TimelineResponse(BaseModel):
    success: bool = True
    platform: str
    timeline: str
    points: List[Dict[str, object]]
    summary: TimelineSummary


class TimelineDefinition(BaseModel):
    key: str
    metric: str
    display_name: str
    color: str


class PlatformDefinitionResponse(BaseModel):
    name: str
    display_name: str
    color: str
    network: str
    timelines: List[TimelineDefinition]

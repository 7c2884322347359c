"""
Marketing router - Metricool analytics for the staff dashboard.

Architecture:
    HTTP Request → Router (this file) → MarketingService → MetricoolService → Metricool REST API
                                      → MarketingGraphService (Plotly HTML)

A platform Metricool fails on is reported as unavailable in the overview;
a failing timeline request surfaces as 502.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from schemas import MarketingOverviewResponse, TimelineResponse
from services import MarketingService
from services.graph import MarketingGraphService
from core.auth import require_staff, verify_api_key
from core.dependencies import get_marketing_graph_service, get_marketing_service

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BACK = 30
MAX_DAYS_BACK = 365

router = APIRouter(
    prefix="/api/v1/marketing",
    tags=["Marketing"],
    dependencies=[Depends(verify_api_key), Depends(require_staff)],
)


@router.get(
    "/overview",
    response_model=MarketingOverviewResponse,
    summary="Cross-platform marketing overview",
    description="Post totals per platform plus total reach and engagement rate."
)
async def get_marketing_overview(
    from_date: Optional[str] = Query(None, alias="from", description="Start date (YYYY-MM-DD)", example="2025-01-01"),
    to_date: Optional[str] = Query(None, alias="to", description="End date (YYYY-MM-DD)", example="2025-01-31"),
    marketing_service: MarketingService = Depends(get_marketing_service)
):
    return marketing_service.get_overview(from_date, to_date)


@router.get(
    "/{platform}/timelines/{timeline}",
    response_model=TimelineResponse,
    summary="Platform timeline",
    description="Time series for one platform metric, with latest value and change over `days_back`."
)
async def get_marketing_timeline(
    platform: str,
    timeline: str,
    from_date: Optional[str] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    days_back: int = Query(DEFAULT_DAYS_BACK, ge=1, le=MAX_DAYS_BACK),
    marketing_service: MarketingService = Depends(get_marketing_service)
):
    """
    Examples:
    - GET /api/v1/marketing/facebook/timelines/followers
    - GET /api/v1/marketing/youtube/timelines/views?days_back=7
    """
    try:
        return marketing_service.get_timeline(platform, timeline, from_date, to_date, days_back)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e).strip("'\""))


@router.get(
    "/{platform}/timelines/{timeline}/html-view",
    summary="Platform timeline chart",
    description="Interactive Plotly chart of one platform metric as a standalone HTML page."
)
async def get_marketing_timeline_html(
    platform: str,
    timeline: str,
    from_date: Optional[str] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    graph_service: MarketingGraphService = Depends(get_marketing_graph_service)
):
    try:
        html_content = graph_service.generate_timeline_html(platform, timeline, from_date, to_date)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e).strip("'\""))
    return Response(content=html_content, media_type="text/html")

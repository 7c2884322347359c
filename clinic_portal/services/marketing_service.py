"""
Service layer for marketing analytics.

Architecture:
    API Layer (routers) → MarketingService → MetricoolService → Metricool REST API
                                           → marketing_metrics (pure aggregation)
"""
import logging
from typing import Optional

from core.marketing_registry import get_platform, list_platforms
from schemas.marketing import (
    MarketingOverview,
    MarketingOverviewResponse,
    PlatformMetrics,
    PostSummary,
    TimelineResponse,
    TimelineSummary,
)
from services.marketing_metrics import build_overview, extract_timeline, summarize_posts, summarize_timeline
from services.metricool_service import MetricoolService

logger = logging.getLogger(__name__)


class MarketingService:
    """Cross-platform overview and per-platform timelines."""

    def __init__(self, metricool_service: MetricoolService):
        self._metricool = metricool_service

    def get_overview(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> MarketingOverviewResponse:
        """
        Fetch every platform and aggregate.

        A platform Metricool fails on is reported with `available=False`;
        the others are still returned.
        """
        results = self._metricool.fetch_all(from_date, to_date)
        platforms = {}
        for name, definition in list_platforms().items():
            payload = results.get(name)
            platforms[name] = PlatformMetrics(
                name=name,
                display_name=definition.display_name,
                available=payload is not None,
                posts=PostSummary(**summarize_posts(payload)) if payload is not None else None,
            )

        unavailable = [name for name, payload in results.items() if payload is None]
        if unavailable:
            logger.warning(f"Marketing overview missing platforms: {', '.join(unavailable)}")

        return MarketingOverviewResponse(
            overview=MarketingOverview(**build_overview(results)),
            platforms=platforms,
        )

    def get_timeline(
        self,
        platform_name: str,
        timeline_key: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        days_back: int = 30,
    ) -> TimelineResponse:
        """
        Raises:
            KeyError: Unknown platform or timeline.
            MetricoolServiceError: If Metricool cannot be reached.
        """
        platform = get_platform(platform_name)
        timeline = platform.get_timeline(timeline_key)
        payload = self._metricool.fetch_timeline(platform.name, timeline.key, from_date, to_date)
        return TimelineResponse(
            platform=platform.name,
            timeline=timeline.key,
            points=extract_timeline(payload),
            summary=TimelineSummary(**summarize_timeline(payload, days_back)),
        )

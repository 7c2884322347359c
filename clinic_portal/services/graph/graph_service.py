"""
Service layer for rendering marketing timeline charts.

This module orchestrates Metricool data retrieval, timeline extraction and
Plotly figure construction. Figure construction is delegated to PlotlyBuilder.
"""
import logging
from typing import Optional

import plotly.io as pio

from core.marketing_registry import get_platform
from services.graph.plotly_builder import PlotlyBuilder
from services.marketing_metrics import extract_timeline, summarize_timeline
from services.metricool_service import MetricoolService

logger = logging.getLogger(__name__)


class MarketingGraphService:
    """
    Produces standalone HTML charts for a platform timeline.
    """

    def __init__(
        self,
        metricool_service: MetricoolService,
        plotly_builder: Optional[PlotlyBuilder] = None,
    ):
        self._metricool = metricool_service
        self._builder = plotly_builder or PlotlyBuilder()

    def generate_timeline_html(
        self,
        platform_name: str,
        timeline_key: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> str:
        """
        Raises:
            KeyError: Unknown platform or timeline.
            MetricoolServiceError: If Metricool cannot be reached.
        """
        platform = get_platform(platform_name)
        timeline = platform.get_timeline(timeline_key)

        payload = self._metricool.fetch_timeline(platform.name, timeline.key, from_date, to_date)
        points = extract_timeline(payload)

        fig = self._builder.create_figure()
        if points:
            fig.add_trace(self._builder.create_timeline_trace(points, timeline))
            self._builder.apply_layout(fig, platform, timeline, summarize_timeline(payload))
        else:
            logger.info(
                "Timeline returned no points",
                extra={"platform": platform.name, "timeline": timeline.key}
            )
            self._builder.apply_empty_layout(fig, platform, timeline)

        html_content = pio.to_html(
            fig,
            include_plotlyjs='cdn',
            config=self._builder.get_mobile_config(),
            div_id="marketing-graph"
        )
        return self._builder.inject_mobile_css(html_content)

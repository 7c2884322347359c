"""
Graph package for marketing visualizations.

This package contains:
- MarketingGraphService: Public orchestration layer for timeline charts
- PlotlyBuilder: Plotly-specific figure construction

Usage:
    from services.graph import MarketingGraphService

    service = MarketingGraphService(metricool_service)
    html = service.generate_timeline_html("facebook", "followers")
"""

from services.graph.graph_service import MarketingGraphService
from services.graph.plotly_builder import PlotlyBuilder

__all__ = [
    'MarketingGraphService',
    'PlotlyBuilder',
]

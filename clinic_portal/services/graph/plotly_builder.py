"""
Plotly figure builder for marketing timeline charts.

Responsibilities:
- Creating the timeline trace
- Applying layout configuration
- Empty-state layout
- Mobile-friendly HTML config and CSS

This module encapsulates all Plotly-specific figure construction logic,
allowing MarketingGraphService to focus on orchestration.
"""
import logging
from typing import Any, Dict, List

import plotly.graph_objects as go

from core.marketing_registry import PlatformDefinition, TimelineMetric

logger = logging.getLogger(__name__)

BRAND_COLOR = "#5D7A5F"


class PlotlyBuilder:
    """
    Builder for constructing Plotly figures of Metricool timelines.

    Usage:
        builder = PlotlyBuilder()
        fig = builder.create_figure()
        fig.add_trace(builder.create_timeline_trace(points, timeline))
        builder.apply_layout(fig, platform, timeline, summary)
    """

    def create_figure(self) -> go.Figure:
        """Create a new empty Plotly figure."""
        return go.Figure()

    def create_timeline_trace(self, points: List[Dict[str, Any]], timeline: TimelineMetric) -> go.Scatter:
        """Spline trace with a light fill under the curve."""
        return go.Scatter(
            x=[p["date"] for p in points],
            y=[p["value"] for p in points],
            name=timeline.display_name,
            mode='lines+markers',
            line=dict(width=3, color=timeline.color, shape='spline'),
            marker=dict(size=7, color=timeline.color, line=dict(width=1.5, color='white')),
            fill='tozeroy',
            fillcolor='rgba(93, 122, 95, 0.08)',
            hovertemplate=(
                f"<b>{timeline.display_name}</b><br>"
                "%{x|%b %d, %Y}<br>"
                "<b>%{y:,.0f}</b>"
                "<extra></extra>"
            ),
        )

    def apply_layout(
        self,
        fig: go.Figure,
        platform: PlatformDefinition,
        timeline: TimelineMetric,
        summary: Dict[str, Any],
    ) -> None:
        """Title with latest value and change, date axis with range selector."""
        change_color = '#2E7D32' if summary["is_positive"] else '#C62828'
        fig.update_layout(
            title=dict(
                text=(
                    f"<b>{platform.display_name} {timeline.display_name}</b><br>"
                    f"<sup style='color:#757575'>{summary['formatted']} "
                    f"<span style='color:{change_color}'>{summary['change']}</span></sup>"
                ),
                font=dict(size=18),
                x=0.5, xanchor="center"
            ),
            xaxis=dict(
                type="date",
                showgrid=True,
                gridcolor='rgba(0,0,0,0.06)',
                tickformat='%b %d',
                tickangle=-45,
                nticks=8,
                rangeselector=dict(
                    buttons=[
                        dict(count=7, label="1W", step="day", stepmode="backward"),
                        dict(count=1, label="1M", step="month", stepmode="backward"),
                        dict(count=3, label="3M", step="month", stepmode="backward"),
                        dict(step="all", label="All"),
                    ],
                    bgcolor='rgba(255,255,255,0.95)',
                    activecolor='#E8EFE8',
                    font=dict(size=11),
                ),
            ),
            yaxis=dict(showgrid=True, gridcolor='rgba(0,0,0,0.06)', rangemode='tozero'),
            hovermode='x unified',
            showlegend=False,
            height=420,
            margin=dict(l=48, r=24, t=80, b=60),
            template="plotly_white",
            paper_bgcolor='#FAFAFA',
            plot_bgcolor='#FFFFFF',
        )

    def apply_empty_layout(self, fig: go.Figure, platform: PlatformDefinition, timeline: TimelineMetric) -> None:
        """Apply layout for a timeline with no data points."""
        fig.update_layout(
            title=dict(
                text=f"<b>{platform.display_name} {timeline.display_name}</b>",
                font=dict(size=18),
                x=0.5, xanchor='center'
            ),
            xaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            yaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
            height=420,
            template="plotly_white",
            paper_bgcolor='#FAFAFA',
            plot_bgcolor='#FFFFFF',
            annotations=[
                dict(text='<b>No data for this period</b>', xref='paper', yref='paper',
                     x=0.5, y=0.5, showarrow=False, font=dict(size=16, color='#424242')),
            ]
        )

    def get_mobile_config(self) -> Dict[str, Any]:
        """Mobile-optimized Plotly config."""
        return {
            'displayModeBar': True,
            'displaylogo': False,
            'modeBarButtonsToRemove': ['lasso2d', 'select2d', 'autoScale2d'],
            'responsive': True,
            'doubleClick': 'reset',
            'toImageButtonOptions': {
                'format': 'png',
                'filename': 'marketing_timeline',
                'height': 600,
                'width': 1200,
                'scale': 2
            },
        }

    def inject_mobile_css(self, html_content: str) -> str:
        """Inject responsive CSS so the chart fills narrow dashboard cards."""
        css = f"""
        <style>
            * {{ box-sizing: border-box; }}
            body {{
                margin: 0;
                padding: 8px;
                background: #FAFAFA;
                font-family: -apple-system, system-ui, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
            }}
            #marketing-graph {{
                width: 100% !important;
                border-radius: 10px;
                border-top: 3px solid {BRAND_COLOR};
                background: white;
            }}
            .js-plotly-plot {{ width: 100% !important; }}
            @media (max-width: 768px) {{
                body {{ padding: 4px; }}
                .modebar {{ display: none !important; }}
            }}
        </style>
        """
        return html_content.replace("</head>", f"{css}</head>", 1)

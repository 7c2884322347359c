"""
Pure helpers for turning Metricool payloads into dashboard numbers.

Metricool returns timelines in a few shapes; everything here accepts:
    {"data": [{"metric": "...", "values": [...], "dates": [...]}]}
    {"data": [{"date": "...", "value": 1}, ...]}
    [{"values": [...]}]  or  [{"date": "...", "value": 1}, ...]
    {"values": [...], "dates": [...]}
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from core.datetime_utils import parse_datetime_safe, utc_now

logger = logging.getLogger(__name__)

VALUE_KEYS = ("value", "count", "total", "y")
DATE_KEYS = ("date", "timestamp", "time")
POSTS_WEEK_DAYS = 7


# =============================================================================
# NUMBER FORMATTING
# =============================================================================

def format_number(num: Optional[float]) -> str:
    """
    Compact display: 1234567 -> "1.2M", 12500 -> "12.5K", 42 -> "42".
    """
    if num is None or (isinstance(num, float) and math.isnan(num)):
        return "0"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    if float(num).is_integer():
        return str(int(num))
    return str(num)


def calculate_change(current: Optional[float], previous: Optional[float]) -> Dict[str, Any]:
    """
    Percentage change between two readings.

    Returns:
        {"value": "+12.5%", "is_positive": True}
    """
    current = _as_number(current)
    previous = _as_number(previous)

    if current == 0 and previous == 0:
        return {"value": "0%", "is_positive": True}
    if previous == 0:
        if current > 0:
            return {"value": "+∞%", "is_positive": True}
        return {"value": "-∞%", "is_positive": False}

    change = (current - previous) / previous * 100
    sign = "+" if change >= 0 else ""
    return {"value": f"{sign}{change:.1f}%", "is_positive": change >= 0}


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)) and not (isinstance(value, float) and math.isnan(value)):
        return float(value)
    return 0.0


def _first_present(item: Dict[str, Any], keys) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


# =============================================================================
# TIMELINES
# =============================================================================

def _series_points(item: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Points from an item carrying parallel `values` and `dates` arrays."""
    values = item["values"]
    dates = item.get("dates") or item.get("timestamps") or []
    today = utc_now().date()
    points = []
    for index, raw in enumerate(values):
        if isinstance(raw, dict):
            value = _as_number(_first_present(raw, VALUE_KEYS))
        else:
            value = _as_number(raw)

        date = dates[index] if index < len(dates) else None
        if not date:
            # Undated series are assumed daily, ending today
            days_ago = len(values) - index - 1
            date = (today - timedelta(days=days_ago)).isoformat()
        points.append({"date": date, "value": value})
    return points


def _points_from_list(items: List[Any]) -> List[Dict[str, Any]]:
    if not items:
        return []
    series = next(
        (i for i in items if isinstance(i, dict) and isinstance(i.get("values"), list) and i["values"]),
        None,
    )
    if series is not None:
        return _series_points(series)
    return [
        {
            "date": _first_present(item, DATE_KEYS) or "",
            "value": _as_number(_first_present(item, VALUE_KEYS[:3])),
        }
        for item in items
        if isinstance(item, dict)
    ]


def extract_timeline(payload: Any) -> List[Dict[str, Any]]:
    """Normalize any supported timeline payload to [{"date", "value"}, ...]."""
    if not payload:
        return []
    if isinstance(payload, list):
        return _points_from_list(payload)
    if isinstance(payload, dict):
        if isinstance(payload.get("data"), list):
            return _points_from_list(payload["data"])
        if isinstance(payload.get("values"), list) and payload["values"]:
            return _series_points(payload)
    return []


def get_latest_value(payload: Any) -> float:
    points = extract_timeline(payload)
    return points[-1]["value"] if points else 0.0


def get_previous_value(payload: Any, days_back: int = 30) -> float:
    """
    Value roughly `days_back` points before the latest one.

    Points are treated as daily; short series fall back to the first point.
    """
    points = extract_timeline(payload)
    if not points:
        return 0.0
    index = max(0, len(points) - int(days_back) - 1)
    return points[index]["value"]


def summarize_timeline(payload: Any, days_back: int = 30) -> Dict[str, Any]:
    """Latest value, comparison value and the change between them."""
    latest = get_latest_value(payload)
    previous = get_previous_value(payload, days_back)
    change = calculate_change(latest, previous)
    return {
        "latest": latest,
        "previous": previous,
        "formatted": format_number(latest),
        "change": change["value"],
        "is_positive": change["is_positive"],
    }


# =============================================================================
# POSTS
# =============================================================================

def _posts(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return [p for p in payload["data"] if isinstance(p, dict)]
    if isinstance(payload, list):
        return [p for p in payload if isinstance(p, dict)]
    return []


def summarize_posts(payload: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Aggregate a Metricool posts payload.

    Clicks count both `clicks` and `linkclicks`. Posts whose
    `created.dateTime` falls in the last 7 days count toward
    `posts_this_week`.
    """
    posts = _posts(payload)
    now = now or utc_now()
    week_ago = now - timedelta(days=POSTS_WEEK_DAYS)

    totals = {
        "reactions": 0.0,
        "comments": 0.0,
        "shares": 0.0,
        "impressions": 0.0,
        "impressions_unique": 0.0,
        "clicks": 0.0,
        "engagement": 0.0,
    }
    posts_this_week = 0

    for post in posts:
        totals["reactions"] += _as_number(post.get("reactions"))
        totals["comments"] += _as_number(post.get("comments"))
        totals["shares"] += _as_number(post.get("shares"))
        totals["impressions"] += _as_number(post.get("impressions"))
        totals["impressions_unique"] += _as_number(post.get("impressionsUnique"))
        totals["clicks"] += _as_number(post.get("clicks")) + _as_number(post.get("linkclicks"))
        totals["engagement"] += _as_number(post.get("engagement"))

        created = post.get("created")
        created_at = parse_datetime_safe(created.get("dateTime")) if isinstance(created, dict) else None
        if created_at is not None and created_at >= week_ago:
            posts_this_week += 1

    count = len(posts)
    return {
        **totals,
        "average_engagement": totals["engagement"] / count if count else 0.0,
        "posts_count": count,
        "posts_this_week": posts_this_week,
    }


def build_overview(results: Dict[str, Any]) -> Dict[str, Any]:
    """
    Cross-platform headline numbers from fetch_all results.

    Reach uses unique impressions; engagement rate is the post-weighted
    average of each platform's average engagement. Platforms whose fetch
    failed (None) contribute nothing and are flagged `available=False`.
    """
    platforms = []
    total_reach = 0.0
    weighted_engagement = 0.0
    total_posts = 0

    for name, payload in results.items():
        if payload is None:
            platforms.append({"name": name, "available": False, "reach": "0", "posts_count": 0, "posts_this_week": 0})
            continue
        summary = summarize_posts(payload)
        total_reach += summary["impressions_unique"]
        weighted_engagement += summary["average_engagement"] * summary["posts_count"]
        total_posts += summary["posts_count"]
        platforms.append({
            "name": name,
            "available": True,
            "reach": format_number(summary["impressions_unique"]),
            "posts_count": summary["posts_count"],
            "posts_this_week": summary["posts_this_week"],
        })

    engagement_rate = weighted_engagement / total_posts if total_posts else 0.0
    return {
        "total_reach": format_number(total_reach),
        "engagement_rate": f"{engagement_rate:.1f}%",
        "total_posts": total_posts,
        "platforms": platforms,
    }

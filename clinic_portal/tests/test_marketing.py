"""
Tests for marketing analytics: metric helpers, the Metricool client,
the marketing endpoints and the public platform metadata.
"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from core.exceptions import MetricoolServiceError
from core.marketing_registry import get_platform, list_platforms
from services.marketing_metrics import (
    build_overview,
    calculate_change,
    extract_timeline,
    format_number,
    get_latest_value,
    get_previous_value,
    summarize_posts,
    summarize_timeline,
)
from services.metricool_service import MetricoolService

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def _post(days_ago, **metrics):
    post = {"created": {"dateTime": (NOW - timedelta(days=days_ago)).isoformat()}}
    post.update(metrics)
    return post


# =============================================================================
# METRIC HELPERS
# =============================================================================

@pytest.mark.parametrize("value, expected", [
    (1234567, "1.2M"),
    (12500, "12.5K"),
    (1000, "1.0K"),
    (42, "42"),
    (42.0, "42"),
    (None, "0"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_calculate_change():
    assert calculate_change(112.5, 100) == {"value": "+12.5%", "is_positive": True}
    assert calculate_change(90, 100) == {"value": "-10.0%", "is_positive": False}
    assert calculate_change(0, 0) == {"value": "0%", "is_positive": True}
    assert calculate_change(5, 0) == {"value": "+∞%", "is_positive": True}
    assert calculate_change(None, 10) == {"value": "-100.0%", "is_positive": False}


def test_extract_timeline_from_metric_series():
    payload = {"data": [{"metric": "pageFollows", "values": [10, 12, 15], "dates": ["2025-03-01", "2025-03-02", "2025-03-03"]}]}
    assert extract_timeline(payload) == [
        {"date": "2025-03-01", "value": 10.0},
        {"date": "2025-03-02", "value": 12.0},
        {"date": "2025-03-03", "value": 15.0},
    ]


def test_extract_timeline_from_point_list():
    payload = {"data": [{"date": "2025-03-01", "value": 3}, {"timestamp": "2025-03-02", "count": 4}]}
    assert extract_timeline(payload) == [
        {"date": "2025-03-01", "value": 3.0},
        {"date": "2025-03-02", "value": 4.0},
    ]


def test_extract_timeline_undated_series_ends_today():
    points = extract_timeline({"values": [1, 2]})
    assert len(points) == 2
    assert points[-1]["value"] == 2.0
    assert points[-1]["date"] > points[0]["date"]


def test_extract_timeline_empty_payloads():
    assert extract_timeline(None) == []
    assert extract_timeline({}) == []
    assert extract_timeline({"data": []}) == []


def test_latest_and_previous_values():
    payload = {"values": list(range(1, 41)), "dates": [f"d{i}" for i in range(40)]}
    assert get_latest_value(payload) == 40.0
    assert get_previous_value(payload, days_back=30) == 10.0
    # Short series fall back to the first point
    assert get_previous_value({"values": [5, 6]}, days_back=30) == 5.0
    assert get_latest_value(None) == 0.0


def test_summarize_timeline():
    summary = summarize_timeline({"values": [10000, 12500], "dates": ["a", "b"]}, days_back=1)
    assert summary == {
        "latest": 12500.0,
        "previous": 10000.0,
        "formatted": "12.5K",
        "change": "+25.0%",
        "is_positive": True,
    }


def test_summarize_posts_counts_link_clicks_and_recent_posts():
    payload = {"data": [
        _post(1, reactions=10, comments=2, shares=1, impressionsUnique=500, clicks=3, linkclicks=4, engagement=2.0),
        _post(10, reactions=5, impressionsUnique=300, clicks=1, engagement=4.0),
        {"reactions": 1},
    ]}
    summary = summarize_posts(payload, now=NOW)
    assert summary["reactions"] == 16.0
    assert summary["clicks"] == 8.0
    assert summary["impressions_unique"] == 800.0
    assert summary["posts_count"] == 3
    assert summary["posts_this_week"] == 1
    assert summary["average_engagement"] == pytest.approx(2.0)


def test_build_overview_skips_failed_platforms():
    results = {
        "facebook": {"data": [{"impressionsUnique": 1500, "engagement": 3.0}, {"impressionsUnique": 500, "engagement": 1.0}]},
        "instagram": [{"impressionsUnique": 1000, "engagement": 5.0}],
        "youtube": None,
    }
    overview = build_overview(results)
    assert overview["total_reach"] == "3.0K"
    assert overview["engagement_rate"] == "3.0%"
    assert overview["total_posts"] == 3
    youtube = next(p for p in overview["platforms"] if p["name"] == "youtube")
    assert youtube["available"] is False


# =============================================================================
# REGISTRY
# =============================================================================

def test_registry_platforms():
    assert list(list_platforms()) == ["facebook", "instagram", "youtube", "web"]
    assert get_platform("Facebook").get_timeline("followers").metric == "pageFollows"
    assert get_platform("youtube").get_timeline("subscribers").metric == "totalSubscribers"
    assert dict(get_platform("web").params)["metric"] == "sessions"


def test_registry_unknown_names():
    with pytest.raises(KeyError):
        get_platform("tiktok")
    with pytest.raises(KeyError):
        get_platform("facebook").get_timeline("subscribers")


# =============================================================================
# METRICOOL CLIENT
# =============================================================================

def test_fetch_sends_auth_header_and_account_params(metricool_service, metricool_payloads, metricool_requests):
    metricool_payloads["/v2/analytics/posts/facebook"] = {"data": []}

    assert metricool_service.fetch_platform("facebook", from_date="2025-03-01", to_date="2025-03-31") == {"data": []}

    request = metricool_requests[0]
    assert request.headers["X-Mc-Auth"] == "test-metricool-token"
    assert request.url.params["userId"] == "42"
    assert request.url.params["blogId"] == "7"
    assert request.url.params["from"] == "2025-03-01"
    assert request.url.params["to"] == "2025-03-31"
    assert "timezone" in request.url.params


def test_fetch_timeline_uses_metric_and_network(metricool_service, metricool_payloads, metricool_requests):
    metricool_payloads["instagram:reach"] = {"values": [1, 2]}

    metricool_service.fetch_timeline("instagram", "reach")

    params = metricool_requests[0].url.params
    assert params["metric"] == "reach"
    assert params["network"] == "instagram"
    assert params["subject"] == "account"


def test_fetch_error_status_raises(metricool_service):
    with pytest.raises(MetricoolServiceError) as exc_info:
        metricool_service.fetch_platform("youtube")
    assert "500" in exc_info.value.detail


def test_fetch_without_token_raises():
    service = MetricoolService(
        base_url="https://metricool.test/api",
        user_token="",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
    )
    with pytest.raises(MetricoolServiceError) as exc_info:
        service.fetch("/v2/analytics/posts/facebook")
    assert exc_info.value.detail == "METRICOOL_USER_TOKEN not configured"


def test_fetch_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = MetricoolService(
        base_url="https://metricool.test/api", user_token="t", transport=httpx.MockTransport(handler)
    )
    with pytest.raises(MetricoolServiceError):
        service.fetch("/v2/analytics/posts/facebook")


def test_fetch_all_isolates_failures(metricool_service, metricool_payloads):
    metricool_payloads["/v2/analytics/posts/facebook"] = {"data": [{"reactions": 1}]}
    metricool_payloads["web:sessions"] = {"values": [5]}

    results = metricool_service.fetch_all()
    assert results["facebook"] == {"data": [{"reactions": 1}]}
    assert results["web"] == {"values": [5]}
    assert results["instagram"] is None
    assert results["youtube"] is None


# =============================================================================
# ENDPOINTS
# =============================================================================

def test_overview_endpoint(client, doctor, as_user, metricool_payloads):
    metricool_payloads["/v2/analytics/posts/facebook"] = {"data": [{"impressionsUnique": 1200, "engagement": 2.5}]}
    metricool_payloads["/v2/analytics/posts/instagram"] = {"data": [{"impressionsUnique": 800, "engagement": 4.5}]}

    response = client.get("/api/v1/marketing/overview?from=2025-03-01&to=2025-03-31", headers=as_user(doctor))
    assert response.status_code == 200
    body = response.json()
    assert body["overview"]["total_reach"] == "2.0K"
    assert body["overview"]["engagement_rate"] == "3.5%"
    assert body["platforms"]["facebook"]["available"] is True
    assert body["platforms"]["facebook"]["posts"]["posts_count"] == 1
    assert body["platforms"]["youtube"]["available"] is False
    assert body["platforms"]["youtube"]["posts"] is None


def test_overview_requires_staff(client, patient, as_user):
    response = client.get("/api/v1/marketing/overview", headers=as_user(patient))
    assert response.status_code == 403


def test_timeline_endpoint(client, doctor, as_user, metricool_payloads):
    metricool_payloads["facebook:pageFollows"] = {
        "data": [{"values": [100, 110, 120], "dates": ["2025-03-01", "2025-03-02", "2025-03-03"]}]
    }
    response = client.get("/api/v1/marketing/facebook/timelines/followers?days_back=2", headers=as_user(doctor))
    assert response.status_code == 200
    body = response.json()
    assert body["platform"] == "facebook"
    assert body["timeline"] == "followers"
    assert len(body["points"]) == 3
    assert body["summary"]["latest"] == 120.0
    assert body["summary"]["change"] == "+20.0%"


def test_timeline_unknown_platform_returns_404(client, doctor, as_user):
    response = client.get("/api/v1/marketing/tiktok/timelines/followers", headers=as_user(doctor))
    assert response.status_code == 404
    assert "tiktok" in response.json()["detail"]


def test_timeline_unknown_metric_returns_404(client, doctor, as_user):
    response = client.get("/api/v1/marketing/youtube/timelines/likes", headers=as_user(doctor))
    assert response.status_code == 404


def test_timeline_metricool_failure_returns_502(client, doctor, as_user):
    response = client.get("/api/v1/marketing/instagram/timelines/followers", headers=as_user(doctor))
    assert response.status_code == 502
    assert response.json()["success"] is False


def test_timeline_html_view(client, doctor, as_user, metricool_payloads):
    metricool_payloads["youtube:views"] = {"values": [10, 20], "dates": ["2025-03-01", "2025-03-02"]}
    response = client.get("/api/v1/marketing/youtube/timelines/views/html-view", headers=as_user(doctor))
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "marketing-graph" in response.text


def test_timeline_html_view_without_points(client, doctor, as_user, metricool_payloads):
    metricool_payloads["web:visitors"] = {"data": []}
    response = client.get("/api/v1/marketing/web/timelines/visitors/html-view", headers=as_user(doctor))
    assert response.status_code == 200
    assert "No data for this period" in response.text


def test_meta_lists_platforms(client):
    response = client.get("/api/v1/meta/marketing-platforms")
    assert response.status_code == 200
    platforms = response.json()
    assert [p["name"] for p in platforms] == ["facebook", "instagram", "youtube", "web"]
    facebook = platforms[0]
    assert facebook["display_name"] == "Facebook"
    assert {t["key"] for t in facebook["timelines"]} == {"followers", "views", "likes", "posts"}


def test_meta_platform_lookup_is_case_insensitive(client):
    response = client.get("/api/v1/meta/marketing-platforms/YouTube")
    assert response.status_code == 200
    assert response.json()["name"] == "youtube"


def test_meta_unknown_platform_returns_404(client):
    response = client.get("/api/v1/meta/marketing-platforms/tiktok")
    assert response.status_code == 404

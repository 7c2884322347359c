"""
Client for the Metricool analytics REST API.
"""
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from core.config import (
    METRICOOL_BASE_URL,
    METRICOOL_USER_TOKEN,
    METRICOOL_USER_ID,
    METRICOOL_BLOG_ID,
    METRICOOL_TIMEZONE,
    METRICOOL_TIMEOUT,
)
from core.exceptions import MetricoolServiceError
from core.marketing_registry import get_platform, get_timeline_endpoint, list_platforms

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Mc-Auth"


class MetricoolService:
    """Fetches posts and timelines for the platforms in the marketing registry."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_token: Optional[str] = None,
        user_id: Optional[str] = None,
        blog_id: Optional[str] = None,
        timezone: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the Metricool client.

        Args:
            base_url: API root. Defaults to METRICOOL_BASE_URL.
            user_token: Value for the X-Mc-Auth header. Defaults to METRICOOL_USER_TOKEN.
            user_id: Metricool user id sent with every request.
            blog_id: Metricool brand (blog) id sent with every request.
            timezone: Timezone used by Metricool to bucket dates.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.base_url = (base_url or METRICOOL_BASE_URL).rstrip('/')
        self.user_token = user_token if user_token is not None else METRICOOL_USER_TOKEN
        self.user_id = user_id or METRICOOL_USER_ID
        self.blog_id = blog_id or METRICOOL_BLOG_ID
        self.timezone = timezone or METRICOOL_TIMEZONE
        self.timeout = timeout or METRICOOL_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def fetch(
        self,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        user_id: Optional[str] = None,
        blog_id: Optional[str] = None,
    ) -> Any:
        """
        GET {base_url}{endpoint} and return the decoded JSON body.

        Raises:
            MetricoolServiceError: If the token is missing, the request fails
                or Metricool answers with a non-2xx status.
        """
        if not self.user_token:
            raise MetricoolServiceError("METRICOOL_USER_TOKEN not configured")

        query: Dict[str, str] = {
            "userId": user_id or self.user_id,
            "blogId": blog_id or self.blog_id,
            "timezone": self.timezone,
        }
        if from_date:
            query["from"] = from_date
        if to_date:
            query["to"] = to_date
        query.update(params or {})

        url = f"{self.base_url}{endpoint}"
        headers = {AUTH_HEADER: self.user_token, "Content-Type": "application/json"}

        try:
            with self._client() as client:
                response = client.get(url, params=query, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Request error calling Metricool {endpoint}: {e}")
            raise MetricoolServiceError(f"Metricool request failed: {e}", endpoint=endpoint)

        if response.is_error:
            logger.error(
                f"Metricool API error: {response.status_code} - {response.text[:500]}",
                extra={"endpoint": endpoint, "status": response.status_code}
            )
            raise MetricoolServiceError(
                f"Metricool API error: {response.status_code} {response.reason_phrase}",
                endpoint=endpoint,
            )

        try:
            return response.json()
        except ValueError:
            raise MetricoolServiceError("Invalid response from Metricool", endpoint=endpoint)

    def fetch_platform(
        self,
        platform_name: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Any:
        """Fetch the main (posts) payload of one platform."""
        platform = get_platform(platform_name)
        return self.fetch(platform.endpoint, dict(platform.params), from_date, to_date)

    def fetch_timeline(
        self,
        platform_name: str,
        timeline_key: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Any:
        """Fetch one account-level timeline (followers, views, ...) of a platform."""
        platform = get_platform(platform_name)
        timeline = platform.get_timeline(timeline_key)
        params = {"metric": timeline.metric, "network": platform.network, "subject": "account"}
        return self.fetch(get_timeline_endpoint(), params, from_date, to_date)

    def fetch_all(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Dict[str, Optional[Any]]:
        """
        Fetch every configured platform.

        Platforms are independent: a failing platform is logged and
        reported as None while the others are still returned.
        """
        results: Dict[str, Optional[Any]] = {}
        for name in list_platforms():
            try:
                results[name] = self.fetch_platform(name, from_date, to_date)
            except MetricoolServiceError as e:
                logger.warning(f"Failed to fetch {name} metrics: {e.detail}")
                results[name] = None
        return results

"""
FastAPI middleware and the in-process metrics collector.

Every request gets a short request_id (returned as X-Request-ID) and the
acting profile id from X-User-Id, both attached to log records for the
duration of the request. Completed requests are counted per route
template; Celery tasks and the email queue report their outcomes here
too, and /metrics exposes the lot.

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes
"""

import logging
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, List, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id, set_user_id

logger = logging.getLogger(__name__)

USER_ID_HEADER_NAME = "X-User-Id"
REQUEST_ID_HEADER_NAME = "X-Request-ID"

# Requests slower than this are logged at WARNING even when they succeed
SLOW_REQUEST_MS = 2000

LATENCY_WINDOW = 1000


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

def _status_class(status_code: int) -> str:
    return f"{status_code // 100}xx"


def _prometheus_block(name: str, help_text: str, metric_type: str, samples: Iterable[Tuple[str, object]]) -> List[str]:
    """One HELP/TYPE header followed by `name{labels} value` lines."""
    lines = [f"# HELP {name} {help_text}", f"# TYPE {name} {metric_type}"]
    for labels, value in samples:
        lines.append(f"{name}{{{labels}}} {value}" if labels else f"{name} {value}")
    lines.append("")
    return lines


@dataclass
class MetricsCollector:
    """
    Process-local counters.

    With several uvicorn workers each worker reports its own numbers, and
    Celery workers keep their own collector.
    """
    durations_ms: Deque[float] = field(default_factory=lambda: deque(maxlen=LATENCY_WINDOW))
    by_status: Counter = field(default_factory=Counter)
    # Keyed by (method, route template), e.g. ("POST", "/api/v1/leads/{lead_id}/tasks")
    by_route: Counter = field(default_factory=Counter)
    # Keyed by (task name, "success" | "failure")
    tasks: Counter = field(default_factory=Counter)
    # Keyed by "queued" | "queue_failed"
    emails: Counter = field(default_factory=Counter)

    @property
    def total_requests(self) -> int:
        return sum(self.by_status.values())

    def record_request(self, method: str, route: str, status_code: int, duration_ms: float) -> None:
        self.durations_ms.append(duration_ms)
        self.by_status[_status_class(status_code)] += 1
        self.by_route[(method, route)] += 1

    def record_task_result(self, task_name: str, success: bool) -> None:
        self.tasks[(task_name, "success" if success else "failure")] += 1

    def record_email(self, outcome: str) -> None:
        self.emails[outcome] += 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """p50/p95/p99 over the most recent requests, zeros when there are none."""
        if not self.durations_ms:
            return {"p50": 0, "p95": 0, "p99": 0}

        durations = sorted(self.durations_ms)
        last = len(durations) - 1
        return {
            f"p{p}": round(durations[min(int(len(durations) * p / 100), last)], 2)
            for p in (50, 95, 99)
        }

    def get_summary(self) -> Dict:
        """Get metrics summary for the /metrics/json endpoint."""
        latencies = self.get_latency_percentiles()
        task_names = sorted({name for name, _ in self.tasks})

        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.by_status["2xx"],
            "http_requests_4xx_total": self.by_status["4xx"],
            "http_requests_5xx_total": self.by_status["5xx"],
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
            "emails_queued_total": self.emails["queued"],
            "emails_queue_failed_total": self.emails["queue_failed"],
            "background_tasks": {
                name: {
                    "success": self.tasks[(name, "success")],
                    "failure": self.tasks[(name, "failure")],
                }
                for name in task_names
            },
        }

    def get_prometheus_format(self) -> str:
        """Export metrics in Prometheus text exposition format."""
        latencies = self.get_latency_percentiles()
        lines: List[str] = []
        lines += _prometheus_block(
            "http_requests_total", "Total HTTP requests", "counter",
            [("", self.total_requests)],
        )
        lines += _prometheus_block(
            "http_requests_by_status", "HTTP requests by status class", "counter",
            [(f'status="{cls}"', self.by_status[cls]) for cls in ("2xx", "4xx", "5xx")],
        )
        lines += _prometheus_block(
            "http_requests_by_route", "HTTP requests by route template", "counter",
            [(f'method="{method}",route="{route}"', count)
             for (method, route), count in sorted(self.by_route.items())],
        )
        lines += _prometheus_block(
            "http_request_duration_ms", "Request duration in milliseconds", "gauge",
            [(f'quantile="0.{p[1:]}"', value) for p, value in latencies.items()],
        )
        lines += _prometheus_block(
            "portal_emails_total", "Emails handed to the delivery queue", "counter",
            [(f'outcome="{outcome}"', self.emails[outcome]) for outcome in ("queued", "queue_failed")],
        )
        lines += _prometheus_block(
            "background_tasks_total", "Celery task completions", "counter",
            [(f'task="{name}",result="{result}"', count)
             for (name, result), count in sorted(self.tasks.items())],
        )
        return "\n".join(lines)


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

def _route_template(request: Request) -> str:
    """Matched route template, so ids in the path don't explode the route counters."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    Probe and docs paths are counted but not logged.
    """

    QUIET_PATHS = frozenset({"/health", "/ready", "/metrics", "/metrics/json", "/docs", "/redoc", "/openapi.json"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        set_request_id(request_id)
        set_user_id(request.headers.get(USER_ID_HEADER_NAME))

        method = request.method
        path = request.url.path
        quiet = path in self.QUIET_PATHS
        start_time = time.perf_counter()

        if not quiet:
            logger.info("Request started", extra={"method": method, "path": path})

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            clear_request_id()
            set_user_id(None)
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

        metrics_collector.record_request(method, _route_template(request), response.status_code, duration_ms)

        if not quiet:
            slow = duration_ms >= SLOW_REQUEST_MS
            log_level = logging.WARNING if response.status_code >= 400 or slow else logging.INFO
            logger.log(
                log_level,
                "Slow request completed" if slow else "Request completed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

        clear_request_id()
        set_user_id(None)
        response.headers[REQUEST_ID_HEADER_NAME] = request_id
        return response

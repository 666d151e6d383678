"""Prometheus metrics helpers and middleware."""

from __future__ import annotations

from time import perf_counter

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

_HTTP_REQUEST_COUNT = Counter(
    "novel_forge_http_requests_total",
    "Total HTTP requests processed by service",
    labelnames=("service", "method", "route", "status"),
)

_HTTP_REQUEST_LATENCY = Histogram(
    "novel_forge_http_request_duration_seconds",
    "Latency of HTTP requests",
    labelnames=("service", "method", "route"),
)

_STAGE_DURATION = Histogram(
    "novel_forge_stage_duration_seconds",
    "Duration of generation stages",
    labelnames=("service", "stage"),
    buckets=(0.5, 1, 5, 15, 30, 60, 120, 300, 600, 1800),
)

_STAGE_COUNTER = Counter(
    "novel_forge_stage_runs_total",
    "Count of stage executions by outcome",
    labelnames=("service", "stage", "status"),
)

_QUALITY_OUTCOMES = Counter(
    "novel_forge_quality_reports_total",
    "Quality check results by outcome (passed, failed, skipped)",
    labelnames=("service", "outcome"),
)

_COMPLETION_LATENCY = Histogram(
    "novel_forge_completion_duration_seconds",
    "Latency of completion calls, streaming retries included",
    labelnames=("service", "stage", "model"),
    buckets=(0.5, 1, 5, 15, 30, 60, 120, 300, 600),
)

_COMPLETION_COUNTER = Counter(
    "novel_forge_completions_total",
    "Completion calls by outcome",
    labelnames=("service", "stage", "model", "status"),
)

_COMPLETION_CHARACTERS = Counter(
    "novel_forge_completion_characters_total",
    "Characters returned by completion calls",
    labelnames=("service", "stage"),
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for FastAPI services."""

    def __init__(self, app: FastAPI, service_name: str) -> None:
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start = perf_counter()
        response = await call_next(request)
        elapsed = perf_counter() - start

        route_template = request.url.path
        route = request.scope.get("route")
        if route and getattr(route, "path", None):
            route_template = route.path  # type: ignore[assignment]

        status = getattr(response, "status_code", 500)
        _HTTP_REQUEST_COUNT.labels(self.service_name, request.method, route_template, str(status)).inc()
        _HTTP_REQUEST_LATENCY.labels(self.service_name, request.method, route_template).observe(elapsed)
        return response


def setup_fastapi_metrics(app: FastAPI, service_name: str, endpoint: str = "/metrics") -> None:
    """Register Prometheus middleware and metrics endpoint for a FastAPI app."""

    if getattr(app.state, "metrics_configured", False):
        return

    app.add_middleware(PrometheusMiddleware, service_name=service_name)

    @app.get(endpoint, include_in_schema=False)
    async def _metrics_endpoint() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.state.metrics_configured = True


def observe_stage_duration(
    stage: str,
    duration_seconds: float,
    *,
    service_name: str,
    status: str = "success",
) -> None:
    """Record metrics for stage execution duration and outcome."""

    _STAGE_DURATION.labels(service_name, stage).observe(max(duration_seconds, 0.0))
    _STAGE_COUNTER.labels(service_name, stage, status).inc()


def observe_quality_outcome(outcome: str, *, service_name: str) -> None:
    _QUALITY_OUTCOMES.labels(service_name, outcome).inc()


def observe_completion(
    *,
    stage: str,
    model: str,
    duration_seconds: float,
    service_name: str,
    status: str = "success",
    characters: int | None = None,
) -> None:
    """Capture latency, outcome and output size of one completion call."""

    _COMPLETION_LATENCY.labels(service_name, stage, model).observe(max(duration_seconds, 0.0))
    _COMPLETION_COUNTER.labels(service_name, stage, model, status).inc()
    if characters:
        _COMPLETION_CHARACTERS.labels(service_name, stage).inc(characters)

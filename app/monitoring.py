"""
Prometheus Monitoring and Metrics.

Provides metrics collection for the Loan Approval Demo API.
"""
import re
import time
from typing import Callable

from prometheus_client import Counter, Histogram, Gauge, Info, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ml.forecast import get_stock

_STOCK_PATH = re.compile(r"(/stocks/)[^/]+(/|$)")
UNKNOWN_SYMBOL_LABEL = "other"

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0]
)

# Prediction metrics
PREDICTION_COUNT = Counter(
    "loan_predictions_total",
    "Total number of loan decisions made",
    ["decision", "model"]
)

PREDICTION_LATENCY = Histogram(
    "loan_prediction_duration_seconds",
    "Loan decision latency in seconds",
    ["model"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

BATCH_SIZE = Histogram(
    "loan_batch_prediction_size",
    "Size of batch prediction requests",
    buckets=[1, 5, 10, 25, 50, 75, 100]
)

# Evaluation metrics
EVALUATION_COUNT = Counter(
    "model_evaluations_total",
    "Total number of evaluation runs",
    ["model_kind"]
)

EVALUATION_LATENCY = Histogram(
    "model_evaluation_duration_seconds",
    "Evaluation run latency in seconds",
    ["model_kind"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

EVALUATION_ACCURACY = Gauge(
    "model_evaluation_accuracy",
    "Accuracy of the most recent evaluation run",
    ["model_kind"]
)

# Forecast metrics
FORECAST_COUNT = Counter(
    "stock_forecasts_total",
    "Total number of stock forecasts generated",
    ["symbol"]
)

# Model metrics
MODEL_INFO = Info(
    "scoring_model",
    "Configuration of the scoring models"
)

# Application metrics
APP_INFO = Info(
    "app",
    "Application information"
)


def set_app_info(name: str, version: str) -> None:
    """Set application info metrics."""
    APP_INFO.info({
        "name": name,
        "version": version,
    })


def set_model_info(vote_estimators: int, vote_seeded: bool) -> None:
    """Set scoring model info metrics."""
    MODEL_INFO.info({
        "models": "linear,vote",
        "vote_estimators": str(vote_estimators),
        "vote_seeded": str(vote_seeded).lower(),
    })


def record_prediction(decision: str, model: str, duration: float) -> None:
    """
    Record a prediction metric.

    Args:
        decision: Decision made (Approved/Rejected)
        model: Model that made the decision (ensemble, linear, vote)
        duration: Prediction duration in seconds
    """
    PREDICTION_COUNT.labels(decision=decision, model=model).inc()
    PREDICTION_LATENCY.labels(model=model).observe(duration)


def record_batch_size(size: int) -> None:
    """Record batch prediction size."""
    BATCH_SIZE.observe(size)


def record_evaluation(model_kind: str, duration: float, accuracy: float) -> None:
    """Record an evaluation run."""
    EVALUATION_COUNT.labels(model_kind=model_kind).inc()
    EVALUATION_LATENCY.labels(model_kind=model_kind).observe(duration)
    EVALUATION_ACCURACY.labels(model_kind=model_kind).set(accuracy)


def record_forecast(symbol: str) -> None:
    """Record a forecast; tickers outside the catalog share one label."""
    stock = get_stock(symbol)
    label = stock.symbol if stock else UNKNOWN_SYMBOL_LABEL
    FORECAST_COUNT.labels(symbol=label).inc()


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_path(request.url.path)

        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration = time.time() - start_time

            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()

            REQUEST_LATENCY.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

        return response

    def _normalize_path(self, path: str) -> str:
        """Replace dynamic path segments with placeholders."""
        return _STOCK_PATH.sub(r"\1{symbol}\2", path)


async def metrics_endpoint(request) -> Response:
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )

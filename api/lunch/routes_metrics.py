"""Prometheus metrics for the lunch order service."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

router = APIRouter()

http_errors_total = Counter(
    "http_errors_total", "Total HTTP errors", ["status", "route"]
)
lunch_orders_created_total = Counter(
    "lunch_orders_created_total", "Total lunch orders created"
)
lunch_orders_cancelled_total = Counter(
    "lunch_orders_cancelled_total", "Total lunch orders cancelled"
)
lunch_cancellations_refused_total = Counter(
    "lunch_cancellations_refused_total",
    "Cancellation attempts refused",
    ["reason"],
)
lunch_orders_completed_total = Counter(
    "lunch_orders_completed_total",
    "Lunch orders moved to COMPLETED",
    ["source"],
)
lunch_sweep_runs_total = Counter(
    "lunch_sweep_runs_total", "Status sweep executions", ["trigger"]
)


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

"""
Metrics for the gateway.
Tracks transfers, listings, and storage failures.
"""

import time
import threading
from typing import Dict, Any

_COUNTERS = (
    "uploads_total",
    "upload_bytes_total",
    "downloads_total",
    "listings_total",
    "not_found_total",
    "storage_errors_total",
)

_metrics_lock = threading.Lock()
_metrics: Dict[str, Any] = dict.fromkeys(_COUNTERS, 0)
_metrics["started_at"] = time.time()


def increment_metric(name: str, value: int = 1):
    """Increment a metric counter."""
    with _metrics_lock:
        _metrics[name] = _metrics.get(name, 0) + value


def get_all_metrics() -> Dict[str, Any]:
    """Get all metrics."""
    with _metrics_lock:
        return _metrics.copy()


def reset_metrics():
    """Zero every counter and restart the uptime clock."""
    with _metrics_lock:
        for key in _COUNTERS:
            _metrics[key] = 0
        _metrics["started_at"] = time.time()


def export_metrics() -> Dict[str, Any]:
    """Export metrics in a format suitable for monitoring."""
    all_metrics = get_all_metrics()
    all_metrics["uptime_seconds"] = round(time.time() - all_metrics["started_at"], 3)
    return all_metrics

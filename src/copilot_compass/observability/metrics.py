"""Prometheus metrics for Copilot Compass.

Cardinality rule: scope ids (enterprise slugs, org names) are NOT labels.
scope_type, status and data_source are labels (bounded).

Metrics are created on first use and only once recording is enabled via
``set_metrics_enabled``; until then every recorder is a no-op.
"""

import logging
from typing import Optional

import prometheus_client

logger = logging.getLogger(__name__)

_enabled = False

# --- Metric singletons (created on first access) ---

_metrics = {}


def set_metrics_enabled(enabled: bool):
    """Turn metric recording on or off for the process."""
    global _enabled
    _enabled = enabled
    logger.debug("Prometheus metrics %s", "enabled" if enabled else "disabled")


def metrics_enabled() -> bool:
    return _enabled


def _metric(name, metric_type, description, labelnames=()):
    """Get or create a Prometheus metric."""
    if not _enabled:
        return None
    if name in _metrics:
        return _metrics[name]
    cls = getattr(prometheus_client, metric_type)
    m = cls(name, description, labelnames=labelnames)
    _metrics[name] = m
    return m


def cache_hits_total():
    return _metric(
        "copilot_compass_cache_hits_total",
        "Counter",
        "Total metrics cache hits",
    )


def cache_misses_total():
    return _metric(
        "copilot_compass_cache_misses_total",
        "Counter",
        "Total metrics cache misses (including expired entries)",
    )


def reports_total():
    return _metric(
        "copilot_compass_reports_total",
        "Counter",
        "Total reports generated",
        labelnames=["data_source"],
    )


def validation_warnings_total():
    return _metric(
        "copilot_compass_validation_warnings_total",
        "Counter",
        "Total non-fatal validation warnings on upstream payloads",
    )


def upstream_request_duration():
    return _metric(
        "copilot_compass_upstream_request_duration_seconds",
        "Histogram",
        "GitHub API request duration in seconds",
        labelnames=["scope_type", "status"],
    )


# --- Helper functions for recording metrics ---

def record_cache_hit():
    m = cache_hits_total()
    if m:
        m.inc()


def record_cache_miss():
    m = cache_misses_total()
    if m:
        m.inc()


def record_report(data_source: str):
    m = reports_total()
    if m:
        m.labels(data_source=data_source).inc()


def record_validation_warnings(count: int):
    m = validation_warnings_total()
    if m and count:
        m.inc(count)


def record_upstream_request(scope_type: str, status: str, duration: float):
    m = upstream_request_duration()
    if m:
        m.labels(scope_type=scope_type, status=status).observe(duration)


def generate_metrics_text() -> Optional[str]:
    """Generate Prometheus metrics text output."""
    if not _enabled:
        return None
    return prometheus_client.generate_latest().decode("utf-8")

"""
Performance Monitoring
Prometheus-based metrics collection for the agent pipeline
"""

from .metrics import CONTENT_TYPE_LATEST, MetricsCollector, metrics_collector

__all__ = [
    "CONTENT_TYPE_LATEST",
    "MetricsCollector",
    "metrics_collector",
]

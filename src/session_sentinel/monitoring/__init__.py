"""Monitoring - CloudWatch metrics."""

from session_sentinel.monitoring.metrics import MetricPoint, MetricType, MetricsCollector

__all__ = ["MetricPoint", "MetricType", "MetricsCollector"]

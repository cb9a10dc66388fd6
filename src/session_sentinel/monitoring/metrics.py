"""Monitoring - login risk, alert volume, evictions and sweep metrics."""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import boto3
from botocore.exceptions import ClientError

from session_sentinel.common.config import Config
from session_sentinel.common.constants import MonitoringConstants
from session_sentinel.common.logging import get_logger

logger = get_logger(__name__)


class MetricType(str, Enum):
    LOGIN_EVALUATED = "login_evaluated"
    COMPOSITE_RISK = "composite_risk_score"
    ALERT_RAISED = "alert_raised"
    SESSION_EVICTED = "session_evicted"
    NEW_DEVICE = "new_device"
    EVALUATION_LATENCY = "evaluation_latency"
    SESSIONS_EXPIRED = "sessions_expired"


@dataclass
class MetricPoint:
    metric_name: str
    value: float
    unit: str = "None"
    timestamp: Optional[datetime] = None
    dimensions: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class MetricsCollector:
    """Collects and publishes metrics to CloudWatch.

    Safe to share between request handlers and the sweeper thread.
    """

    DEFAULT_REGION = "us-east-1"
    DEFAULT_NAMESPACE = MonitoringConstants.DEFAULT_NAMESPACE

    def __init__(self, namespace: Optional[str] = None, region: Optional[str] = None,
                 aws_profile: Optional[str] = None,
                 batch_size: int = MonitoringConstants.DEFAULT_BATCH_SIZE):
        self.namespace = namespace or self.DEFAULT_NAMESPACE
        self.region = region or self.DEFAULT_REGION
        self.batch_size = batch_size
        self.metric_buffer: List[MetricPoint] = []
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()

        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.cloudwatch = session.client("cloudwatch", region_name=self.region)
        else:
            self.cloudwatch = boto3.client("cloudwatch", region_name=self.region)

        logger.info(f"Initialized MetricsCollector: namespace={self.namespace}")

    @classmethod
    def from_config(cls, config: Config) -> "MetricsCollector":
        return cls(namespace=config.metrics_namespace, region=config.aws_region)

    def record_metric(self, metric: MetricPoint) -> None:
        """Buffer a metric point, flushing when the buffer is full."""
        with self._lock:
            self.metric_buffer.append(metric)
            full = len(self.metric_buffer) >= self.batch_size
        if full:
            self.flush()

    def record_login_evaluation(
        self,
        composite_score: float,
        alert_types: Sequence[str] = (),
        evicted: bool = False,
        new_device: bool = False,
        latency_ms: Optional[float] = None,
    ) -> None:
        """Record metrics for one evaluated login.

        Args:
            composite_score: Per-login composite risk
            alert_types: Alert type values raised by the login
            evicted: Whether the login evicted an older session
            new_device: Whether the login registered a new device
            latency_ms: End-to-end evaluation latency
        """
        self.record_metric(MetricPoint(
            metric_name=MetricType.LOGIN_EVALUATED.value,
            value=1.0,
            unit="Count",
        ))
        self.record_metric(MetricPoint(
            metric_name=MetricType.COMPOSITE_RISK.value,
            value=composite_score,
        ))

        for alert_type in alert_types:
            self.record_metric(MetricPoint(
                metric_name=MetricType.ALERT_RAISED.value,
                value=1.0,
                unit="Count",
                dimensions={"alert_type": alert_type},
            ))

        if evicted:
            self.record_metric(MetricPoint(
                metric_name=MetricType.SESSION_EVICTED.value,
                value=1.0,
                unit="Count",
            ))

        if new_device:
            self.record_metric(MetricPoint(
                metric_name=MetricType.NEW_DEVICE.value,
                value=1.0,
                unit="Count",
            ))

        if latency_ms is not None:
            self.record_metric(MetricPoint(
                metric_name=MetricType.EVALUATION_LATENCY.value,
                value=latency_ms,
                unit="Milliseconds",
            ))

    def record_sweep(self, sessions_expired: int) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.SESSIONS_EXPIRED.value,
            value=float(sessions_expired),
            unit="Count",
        ))

    def flush(self) -> None:
        """Flush buffered metrics to CloudWatch.

        Points stay buffered until every batch is accepted.

        Raises:
            IOError: If CloudWatch write fails
        """
        with self._flush_lock:
            with self._lock:
                pending = list(self.metric_buffer)
            if not pending:
                return

            metric_data: List[Dict[str, Any]] = []
            for metric in pending:
                metric_dict: Dict[str, Any] = {
                    "MetricName": metric.metric_name,
                    "Value": metric.value,
                    "Unit": metric.unit,
                    "Timestamp": metric.timestamp,
                }
                if metric.dimensions:
                    metric_dict["Dimensions"] = [
                        {"Name": k, "Value": str(v)}
                        for k, v in metric.dimensions.items()
                    ]
                metric_data.append(metric_dict)

            max_batch = MonitoringConstants.CLOUDWATCH_MAX_BATCH
            try:
                for i in range(0, len(metric_data), max_batch):
                    self.cloudwatch.put_metric_data(
                        Namespace=self.namespace,
                        MetricData=metric_data[i:i + max_batch],
                    )
            except ClientError as e:
                logger.error(f"Failed to publish metrics: {e}")
                raise IOError(f"CloudWatch write failed: {e}") from e

            with self._lock:
                del self.metric_buffer[:len(pending)]
            logger.debug(f"Published {len(pending)} metrics to CloudWatch")

    def shutdown(self) -> None:
        """Flush remaining metrics on shutdown."""
        self.flush()

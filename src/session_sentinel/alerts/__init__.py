"""Alert Generator and Account Risk Aggregator - module init."""

from session_sentinel.alerts.aggregator import AccountRiskAggregator
from session_sentinel.alerts.generator import (
    AlertDraft,
    AlertGenerator,
    AlertOutcome,
    AlertWarnings,
)

__all__ = [
    "AccountRiskAggregator",
    "AlertDraft",
    "AlertGenerator",
    "AlertOutcome",
    "AlertWarnings",
]

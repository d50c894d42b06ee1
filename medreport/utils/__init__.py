"""Utility modules for medreport."""

from medreport.utils.config import settings, PageConfig, LatencyConfig
from medreport.utils.logging import (
    get_logger,
    get_latency_logger,
    get_compliance_logger,
    monitor_latency,
    RequestContext,
)

__all__ = [
    "settings",
    "PageConfig",
    "LatencyConfig",
    "get_logger",
    "get_latency_logger",
    "get_compliance_logger",
    "monitor_latency",
    "RequestContext",
]

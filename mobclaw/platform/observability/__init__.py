"""Observability infrastructure module.

This module provides monitoring and error tracking:
- Structured logging with correlation and task IDs
- Prometheus metrics
- Bugsnag error reporting
"""

from mobclaw.platform.observability.errors import initialize_bugsnag
from mobclaw.platform.observability.logging import (
    configure_logging,
    correlation_id_ctx,
    get_logger,
)
from mobclaw.platform.observability.metrics import (
    BUCKETS,
    prometheus_middleware,
)

__all__ = [
    "BUCKETS",
    "configure_logging",
    "correlation_id_ctx",
    "get_logger",
    "initialize_bugsnag",
    "prometheus_middleware",
]

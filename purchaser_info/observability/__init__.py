"""
Observability module - Logging and Metrics.
"""

from purchaser_info.observability.logging import get_logger, log_context, setup_logging
from purchaser_info.observability.metrics import metrics

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
]

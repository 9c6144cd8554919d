"""
Observability Module for the Kiosk Ledger

Provides structured logging with correlation IDs (order, member, return code)
so one purchase or return can be traced across catalog, order and ledger logs.
"""

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
]

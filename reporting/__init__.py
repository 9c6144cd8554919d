"""Reporting Package."""

from .metrics import MetricsAggregator, MetricsSummary, PeriodMetrics

__all__ = ["MetricsAggregator", "MetricsSummary", "PeriodMetrics"]

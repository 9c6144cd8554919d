"""
Kiosk Metrics

Read-only aggregation of orders and deposit returns into the figures the
operator dashboard shows: revenue, deposit liability and refunds, and the
environmental savings of sold and returned containers.

Periods:
- today: the clock's local calendar date
- total: everything on record
- daily: the 7 calendar days ending today, oldest first, zero-filled
"""

import sqlite3
from datetime import date, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from catalog.incentive import round_carbon, round_water
from core.observability import get_logger
from storage import queries
from storage.db import KioskStore


logger = get_logger(__name__)

DAILY_WINDOW_DAYS = 7


# =============================================================================
# MODELS
# =============================================================================

class PeriodMetrics(BaseModel):
    """Figures for one reporting period."""
    day: Optional[str] = Field(None, description="ISO date; None for the all-time period")
    revenue_cents: int = 0
    deposit_liability_cents: int = 0
    deposit_refunded_cents: int = 0
    outstanding_deposit_cents: int = 0
    deposit_refund_rate: float = 0.0
    carbon_saving: float = 0.0
    water_saving: float = 0.0
    recycled_carbon: float = 0.0
    recycled_water: float = 0.0
    returns_accepted: int = 0
    returns_rejected: int = 0
    orders_done: int = 0


class MetricsSummary(BaseModel):
    today: PeriodMetrics
    total: PeriodMetrics
    daily: List[PeriodMetrics]


# =============================================================================
# AGGREGATOR
# =============================================================================

def refund_rate(refunded_cents: int, liability_cents: int) -> float:
    """Share of deposit liability refunded, 4 decimals; 0 without liability."""
    if liability_cents <= 0:
        return 0.0
    return round(refunded_cents / liability_cents, 4)


def _period(
    day: Optional[str],
    order_row: Optional[sqlite3.Row],
    return_row: Optional[sqlite3.Row],
) -> PeriodMetrics:
    metrics = PeriodMetrics(day=day)

    if order_row is not None:
        metrics.revenue_cents = order_row["revenue_cents"]
        metrics.deposit_liability_cents = order_row["deposit_liability_cents"]
        metrics.carbon_saving = round_carbon(order_row["carbon_saving"])
        metrics.water_saving = round_water(order_row["water_saving"])
        metrics.orders_done = order_row["orders_done"]

    if return_row is not None:
        metrics.deposit_refunded_cents = return_row["deposit_refunded_cents"]
        metrics.recycled_carbon = round_carbon(return_row["recycled_carbon"])
        metrics.recycled_water = round_water(return_row["recycled_water"])
        metrics.returns_accepted = return_row["returns_accepted"]
        metrics.returns_rejected = return_row["returns_rejected"]

    liability = metrics.deposit_liability_cents
    refunded = metrics.deposit_refunded_cents
    metrics.outstanding_deposit_cents = max(0, liability - refunded)
    metrics.deposit_refund_rate = refund_rate(refunded, liability)
    return metrics


class MetricsAggregator:
    """
    Dashboard metrics over the kiosk ledger.

    Usage:
        summary = MetricsAggregator(store).summary()
        print(summary.today.revenue_cents)
    """

    def __init__(self, store: KioskStore):
        self.store = store

    def window(self) -> List[str]:
        """ISO dates of the daily window, oldest first."""
        today = date.fromisoformat(self.store.today())
        return [
            (today - timedelta(days=offset)).isoformat()
            for offset in range(DAILY_WINDOW_DAYS - 1, -1, -1)
        ]

    def total(self) -> PeriodMetrics:
        return _period(
            None,
            self.store.fetchone(queries.ORDER_TOTALS_ALL),
            self.store.fetchone(queries.RETURN_TOTALS_ALL),
        )

    def daily(self) -> List[PeriodMetrics]:
        days = self.window()
        bounds = (days[0], days[-1])

        orders: Dict[str, sqlite3.Row] = {
            row["day"]: row for row in self.store.fetchall(queries.ORDER_TOTALS_BY_DAY, bounds)
        }
        returns: Dict[str, sqlite3.Row] = {
            row["day"]: row for row in self.store.fetchall(queries.RETURN_TOTALS_BY_DAY, bounds)
        }
        return [_period(day, orders.get(day), returns.get(day)) for day in days]

    def summary(self) -> MetricsSummary:
        """
        Today, all-time and 7-day figures.

        All three periods are read under the store lock in one
        transaction so they agree with each other.
        """
        with self.store.transaction():
            daily = self.daily()
            total = self.total()

        summary = MetricsSummary(today=daily[-1], total=total, daily=daily)
        logger.debug(
            "Metrics summary computed",
            extra_fields={"orders_done": total.orders_done, "returns_accepted": total.returns_accepted},
        )
        return summary

"""Read-side arithmetic for the dashboard and profit reports.

Everything here is a pure function of transaction and product lists. Time
windows are evaluated against ``now`` (local wall-clock time when omitted) on
every call.
"""
from __future__ import annotations

import datetime
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from biztrack.core.config import CURRENCY_SYMBOL
from biztrack.entities import Account, PaymentMethod, Product, Transaction

# Margin assumed for a sale that is not linked to a catalogue product. This is
# an estimate for the dashboard only.
FALLBACK_MARGIN = 0.2

POPULAR_WINDOW_DAYS = 30
POPULAR_LIMIT = 3
DASHBOARD_LOW_STOCK = 5
DASHBOARD_RECENT = 8


class TimeWindow(str, Enum):
    TODAY = "TODAY"
    WEEK = "WEEK"  # calendar week starting Sunday
    MONTH = "MONTH"
    ALL_TIME = "ALL_TIME"


def _now(now: Optional[datetime.datetime]) -> datetime.datetime:
    return now or datetime.datetime.now()


def _txn_time(txn: Transaction) -> datetime.datetime:
    return datetime.datetime.fromtimestamp((txn.timestamp or 0) / 1000)


def window_bounds(
    window: TimeWindow, now: Optional[datetime.datetime] = None
) -> Tuple[Optional[datetime.datetime], Optional[datetime.datetime]]:
    """Return the half-open ``[start, end)`` range of a window; ``None`` is unbounded."""
    window = TimeWindow(window)
    if window == TimeWindow.ALL_TIME:
        return None, None
    moment = _now(now)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == TimeWindow.TODAY:
        return midnight, midnight + datetime.timedelta(days=1)
    if window == TimeWindow.WEEK:
        # weekday(): Monday=0 .. Sunday=6
        start = midnight - datetime.timedelta(days=(midnight.weekday() + 1) % 7)
        return start, start + datetime.timedelta(days=7)
    start = midnight.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def _within(when, start, end) -> bool:
    return (start is None or when >= start) and (end is None or when < end)


def in_window(txn: Transaction, window: TimeWindow, now: Optional[datetime.datetime] = None) -> bool:
    start, end = window_bounds(window, now)
    return _within(_txn_time(txn), start, end)


def filter_window(
    transactions: Iterable[Transaction], window: TimeWindow, now: Optional[datetime.datetime] = None
) -> List[Transaction]:
    start, end = window_bounds(window, now)
    return [t for t in transactions if _within(_txn_time(t), start, end)]


def total_revenue(transactions, window=TimeWindow.ALL_TIME, now=None) -> float:
    return sum(t.amount for t in filter_window(transactions, window, now) if t.is_sale)


def total_expenses(transactions, window=TimeWindow.ALL_TIME, now=None) -> float:
    return sum(t.amount for t in filter_window(transactions, window, now) if t.is_expense)


def line_profit(txn: Transaction, products: Sequence[Product]) -> float:
    """Profit contribution of one sale line.

    Linked to a product: (sell - buy) * quantity at current catalogue prices.
    Otherwise ``amount * FALLBACK_MARGIN``.
    """
    product = next((p for p in products if txn.item_id and p.id == txn.item_id), None)
    if product is None:
        return txn.amount * FALLBACK_MARGIN
    return product.unit_margin * txn.units


def estimated_profit(transactions, products, window=TimeWindow.ALL_TIME, now=None) -> float:
    return sum(line_profit(t, products) for t in filter_window(transactions, window, now) if t.is_sale)


def net_profit(transactions, products, window=TimeWindow.ALL_TIME, now=None) -> float:
    rows = filter_window(transactions, window, now)
    return estimated_profit(rows, products) - total_expenses(rows)


def payment_breakdown(transactions, window=TimeWindow.TODAY, now=None) -> Dict[PaymentMethod, float]:
    totals = {method: 0.0 for method in PaymentMethod}
    for txn in filter_window(transactions, window, now):
        if txn.is_sale:
            totals[PaymentMethod(txn.method)] += txn.amount
    return totals


def low_stock(products: Iterable[Product]) -> List[Product]:
    return [p for p in products if p.is_low_stock]


def popular_items(
    transactions: Iterable[Transaction],
    now: Optional[datetime.datetime] = None,
    days: int = POPULAR_WINDOW_DAYS,
    limit: int = POPULAR_LIMIT,
) -> List[Tuple[str, int]]:
    """Most-sold item names over the trailing ``days``, by number of sales."""
    cutoff = _now(now) - datetime.timedelta(days=days)
    counts: Counter = Counter()
    for txn in transactions:
        if txn.is_sale and txn.item_name and _txn_time(txn) > cutoff:
            counts[txn.item_name] += 1
    # sorted() is stable, so equal counts keep first-seen order
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def inventory_value(products: Iterable[Product]) -> float:
    """Stock valued at cost."""
    return sum(p.buy_price * p.stock_count for p in products)


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{CURRENCY_SYMBOL} {amount:,.0f}"
    return f"{CURRENCY_SYMBOL} {amount:,.2f}"


@dataclass
class PeriodSummary:
    window: TimeWindow
    start: Optional[datetime.datetime]
    revenue: float
    expenses: float
    gross_profit: float
    net_profit: float
    method_breakdown: Dict[PaymentMethod, float]


def summarize(transactions, products, window=TimeWindow.TODAY, now=None) -> PeriodSummary:
    rows = filter_window(transactions, window, now)
    gross = estimated_profit(rows, products)
    expenses = total_expenses(rows)
    start, _ = window_bounds(window, now)
    return PeriodSummary(
        window=TimeWindow(window),
        start=start,
        revenue=total_revenue(rows),
        expenses=expenses,
        gross_profit=gross,
        net_profit=gross - expenses,
        method_breakdown=payment_breakdown(rows, TimeWindow.ALL_TIME),
    )


@dataclass
class TrailingReport:
    days: int
    sales: float
    expenses: float
    cash_flow: float
    popular: List[Tuple[str, int]]


def trailing_report(transactions, now=None, days: int = POPULAR_WINDOW_DAYS) -> TrailingReport:
    """Sales against expenses over the last ``days``, with the best sellers."""
    cutoff_ms = (_now(now) - datetime.timedelta(days=days)).timestamp() * 1000
    rows = [t for t in transactions if (t.timestamp or 0) > cutoff_ms]
    sales = sum(t.amount for t in rows if t.is_sale)
    expenses = sum(t.amount for t in rows if t.is_expense)
    return TrailingReport(
        days=days,
        sales=sales,
        expenses=expenses,
        cash_flow=sales - expenses,
        popular=popular_items(rows, now=now, days=days),
    )


@dataclass
class DashboardView:
    is_management: bool
    headline_label: str
    headline: float
    sales_today: float
    expenses_today: Optional[float]
    method_breakdown: Dict[PaymentMethod, float]
    low_stock: List[Product] = field(default_factory=list)
    recent: List[Transaction] = field(default_factory=list)


def dashboard_for(account: Account, transactions, products, now=None) -> DashboardView:
    """Today's figures as shown to ``account``.

    Owners and managers see profit and low-stock alerts; sales people only see
    what they sold.
    """
    today = filter_window(transactions, TimeWindow.TODAY, now)
    sales = total_revenue(today)
    if account.is_management:
        profit = net_profit(today, products)
        return DashboardView(
            is_management=True,
            headline_label="Total Profit Today",
            headline=profit,
            sales_today=sales,
            expenses_today=total_expenses(today),
            method_breakdown=payment_breakdown(today, TimeWindow.ALL_TIME),
            low_stock=low_stock(products)[:DASHBOARD_LOW_STOCK],
            recent=today[:DASHBOARD_RECENT],
        )
    return DashboardView(
        is_management=False,
        headline_label="Sales Recorded Today",
        headline=sales,
        sales_today=sales,
        expenses_today=None,
        method_breakdown=payment_breakdown(today, TimeWindow.ALL_TIME),
        recent=today[:DASHBOARD_RECENT],
    )

"""Daily, monthly and trend aggregates over income/expense records.

The ``summarize_*``/``build_trend`` functions are pure: they take any
iterable of objects exposing ``type``, ``amount``, ``category`` and
``occurred_on`` and never touch the database. The ``aggregate_*`` wrappers
load one owner's records for the period and delegate to them. Nothing is
cached; every call recomputes from the stored records.
"""
import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from ..models import EXPENSE, INCOME, Transaction

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def money(value):
    return float(to_decimal(value))


def percent(value):
    return round(float(value), 2)


def percentage_of(value, total):
    """``value / total * 100``; a zero or missing total gives 0."""
    total = to_decimal(total)
    if total == 0:
        return ZERO
    return to_decimal(value) / total * HUNDRED


def percentage_change(current, previous):
    current, previous = to_decimal(current), to_decimal(previous)
    if previous == 0:
        return HUNDRED if current > 0 else ZERO
    return (current - previous) / previous * HUNDRED


def project(value, current_day, days_in_month):
    """Extrapolate a month-to-date value to the full month."""
    if not current_day:
        return ZERO
    return to_decimal(value) / Decimal(current_day) * Decimal(days_in_month)


def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]


def month_bounds(year, month):
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def previous_month(year, month):
    return (year - 1, 12) if month == 1 else (year, month - 1)


@dataclass
class DailyAggregate:
    day: Optional[date] = None
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    transaction_count: int = 0
    category_totals: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def balance(self):
        return self.total_income - self.total_expenses

    def to_dict(self):
        return {
            "date": self.day.isoformat() if self.day else None,
            "income": money(self.total_income),
            "expenses": money(self.total_expenses),
            "balance": money(self.balance),
            "transactionCount": self.transaction_count,
            "categoryTotals": {k: money(v) for k, v in self.category_totals.items()},
        }

    def to_trend_point(self):
        return {
            "date": self.day.isoformat(),
            "income": money(self.total_income),
            "expenses": money(self.total_expenses),
            "balance": money(self.balance),
        }


@dataclass
class MonthlyAggregate:
    year: int
    month: int
    days_in_month: int
    monthly_income: Decimal = ZERO
    monthly_expenses: Decimal = ZERO
    active_days: int = 0
    transaction_count: int = 0
    category_totals: Dict[str, Decimal] = field(default_factory=dict)
    daily_totals: List[DailyAggregate] = field(default_factory=list)
    current_day: Optional[int] = None

    @property
    def monthly_savings(self):
        return self.monthly_income - self.monthly_expenses

    @property
    def average_daily_income(self):
        return self.monthly_income / self.active_days if self.active_days else ZERO

    @property
    def average_daily_expenses(self):
        return self.monthly_expenses / self.active_days if self.active_days else ZERO

    @property
    def projected_income(self):
        return project(self.monthly_income, self.current_day, self.days_in_month)

    @property
    def projected_expenses(self):
        return project(self.monthly_expenses, self.current_day, self.days_in_month)

    def active_day_map(self):
        """Days with at least one record, keyed by ISO date."""
        return {
            daily.day.isoformat(): {"income": money(daily.total_income), "expenses": money(daily.total_expenses)}
            for daily in self.daily_totals
            if daily.transaction_count
        }

    def to_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "daysInMonth": self.days_in_month,
            "currentDay": self.current_day,
            "monthlyIncome": money(self.monthly_income),
            "monthlyExpenses": money(self.monthly_expenses),
            "monthlySavings": money(self.monthly_savings),
            "activeDays": self.active_days,
            "transactionCount": self.transaction_count,
            "averageDailyIncome": money(round(self.average_daily_income, 2)),
            "averageDailyExpenses": money(round(self.average_daily_expenses, 2)),
            "projectedIncome": money(round(self.projected_income, 2)),
            "projectedExpenses": money(round(self.projected_expenses, 2)),
            "categoryTotals": {k: money(v) for k, v in self.category_totals.items()},
            "dailyTotals": [
                dict(day.to_trend_point(), hasTransactions=day.transaction_count > 0)
                for day in self.daily_totals
            ],
        }


def summarize_day(transactions, day=None):
    agg = DailyAggregate(day=day)
    for txn in transactions:
        amount = to_decimal(txn.amount)
        if txn.type == INCOME:
            agg.total_income += amount
        elif txn.type == EXPENSE:
            agg.total_expenses += amount
            if txn.category:
                agg.category_totals[txn.category] = agg.category_totals.get(txn.category, ZERO) + amount
        else:
            continue
        agg.transaction_count += 1
    return agg


def _by_date(transactions):
    grouped = defaultdict(list)
    for txn in transactions:
        grouped[txn.occurred_on].append(txn)
    return grouped


def summarize_month(transactions, year, month, current_day=None):
    grouped = _by_date(transactions)
    agg = MonthlyAggregate(year=year, month=month, days_in_month=days_in_month(year, month),
                           current_day=current_day)
    for number in range(1, agg.days_in_month + 1):
        day = date(year, month, number)
        daily = summarize_day(grouped.get(day, ()), day)
        agg.daily_totals.append(daily)
        agg.monthly_income += daily.total_income
        agg.monthly_expenses += daily.total_expenses
        agg.transaction_count += daily.transaction_count
        if daily.transaction_count:
            agg.active_days += 1
        for name, amount in daily.category_totals.items():
            agg.category_totals[name] = agg.category_totals.get(name, ZERO) + amount
    agg.category_totals = dict(sorted(agg.category_totals.items(), key=lambda kv: kv[1], reverse=True))
    return agg


def build_trend(transactions, end_date, num_days):
    """One aggregate per calendar day ending at ``end_date``, oldest first, zero-filled."""
    if num_days < 1:
        raise ValueError("num_days must be at least 1")
    grouped = _by_date(transactions)
    start = end_date - timedelta(days=num_days - 1)
    series = []
    for offset in range(num_days):
        day = start + timedelta(days=offset)
        series.append(summarize_day(grouped.get(day, ()), day))
    return series


def top_categories(category_totals, limit=5):
    total = sum((to_decimal(v) for v in category_totals.values()), ZERO)
    ranked = sorted(category_totals.items(), key=lambda kv: to_decimal(kv[1]), reverse=True)[:limit]
    return [
        {"category": name, "amount": money(amount), "percentage": percent(percentage_of(amount, total))}
        for name, amount in ranked
    ]


def _between(owner_id, start, end):
    return Transaction.query.filter(
        Transaction.user_id == owner_id,
        Transaction.occurred_on >= start,
        Transaction.occurred_on <= end,
    ).all()


def aggregate_day(owner_id, day):
    return summarize_day(_between(owner_id, day, day), day)


def aggregate_month(owner_id, year, month, current_day=None):
    start, end = month_bounds(year, month)
    return summarize_month(_between(owner_id, start, end), year, month, current_day)


def aggregate_trend(owner_id, end_date, num_days):
    start = end_date - timedelta(days=num_days - 1)
    return build_trend(_between(owner_id, start, end_date), end_date, num_days)

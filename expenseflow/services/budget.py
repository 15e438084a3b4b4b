"""Classify a month's actuals against the owner's budget goals.

``evaluate`` is a pure function of a ``MonthlyAggregate``, the goal targets
and the position within the month. Threshold ratios live in
``BudgetPolicy`` so deployments can tune them through config.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from .aggregation import ZERO, money, percent, percentage_of, project, to_decimal

GOOD = "good"
WARNING = "warning"
DANGER = "danger"
NEUTRAL = "neutral"


@dataclass(frozen=True)
class BudgetPolicy:
    income_good_ratio: Decimal = Decimal("0.8")
    income_warning_ratio: Decimal = Decimal("0.5")
    category_warning_percent: Decimal = Decimal("80")

    @classmethod
    def from_config(cls, config):
        return cls(
            income_good_ratio=to_decimal(config["BUDGET_INCOME_GOOD_RATIO"]),
            income_warning_ratio=to_decimal(config["BUDGET_INCOME_WARNING_RATIO"]),
            category_warning_percent=to_decimal(config["BUDGET_CATEGORY_WARNING_PERCENT"]),
        )


DEFAULT_POLICY = BudgetPolicy()


@dataclass(frozen=True)
class GoalTargets:
    monthly_income: Decimal = ZERO
    monthly_expenses: Decimal = ZERO
    savings_target: Decimal = ZERO
    categories: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self):
        return {
            "monthlyIncome": money(self.monthly_income),
            "monthlyExpenses": money(self.monthly_expenses),
            "savingsTarget": money(self.savings_target),
            "categories": {name: money(limit) for name, limit in self.categories.items()},
        }


@dataclass
class CategoryStatus:
    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    progress: Decimal
    over_budget: bool
    projected_spent: Decimal
    on_track: bool
    status: str

    def to_dict(self):
        return {
            "category": self.category,
            "limit": money(self.limit),
            "spent": money(self.spent),
            "remaining": money(self.remaining),
            "progress": percent(self.progress),
            "overBudget": self.over_budget,
            "projectedSpent": money(round(self.projected_spent, 2)),
            "onTrack": self.on_track,
            "status": self.status,
        }


@dataclass
class BudgetStatus:
    income_progress: Decimal
    expense_progress: Decimal
    savings_progress: Decimal
    time_progress: Decimal
    income_status: str
    expense_status: str
    savings_status: str
    income_on_track: bool
    expense_on_track: bool
    savings_on_track: bool
    remaining: Dict[str, Decimal]
    daily_targets: Dict[str, Decimal]
    categories: List[CategoryStatus] = field(default_factory=list)

    @property
    def overall(self):
        return GOOD if self.income_on_track and self.expense_on_track else WARNING

    def to_dict(self):
        return {
            "incomeProgress": percent(self.income_progress),
            "expenseProgress": percent(self.expense_progress),
            "savingsProgress": percent(self.savings_progress),
            "timeProgress": percent(self.time_progress),
            "incomeStatus": self.income_status,
            "expenseStatus": self.expense_status,
            "savingsStatus": self.savings_status,
            "incomeOnTrack": self.income_on_track,
            "expenseOnTrack": self.expense_on_track,
            "savingsOnTrack": self.savings_on_track,
            "overall": self.overall,
            "remaining": {k: money(round(v, 2)) for k, v in self.remaining.items()},
            "dailyTargets": {k: money(round(v, 2)) for k, v in self.daily_targets.items()},
            "categories": [c.to_dict() for c in self.categories],
        }


def classify_expense(progress, time_progress):
    """Spending is fine while it keeps pace with the month, at risk until the limit."""
    if progress <= time_progress:
        return GOOD
    if progress <= 100:
        return WARNING
    return DANGER


def classify_income(progress, time_progress, policy=DEFAULT_POLICY):
    if progress >= time_progress * policy.income_good_ratio:
        return GOOD
    if progress >= time_progress * policy.income_warning_ratio:
        return WARNING
    return DANGER


def evaluate_category(name, limit, spent, current_day, days_in_month, policy=DEFAULT_POLICY):
    limit, spent = to_decimal(limit), to_decimal(spent)
    raw_progress = percentage_of(spent, limit)
    over_budget = spent > limit
    projected = project(spent, current_day, days_in_month)
    if over_budget:
        status = DANGER
    elif raw_progress > policy.category_warning_percent:
        status = WARNING
    else:
        status = GOOD
    return CategoryStatus(
        category=name,
        limit=limit,
        spent=spent,
        remaining=max(ZERO, limit - spent),
        progress=min(raw_progress, Decimal(100)),
        over_budget=over_budget,
        projected_spent=projected,
        on_track=projected <= limit,
        status=status,
    )


def evaluate(monthly, goal, current_day, days_in_month, policy=DEFAULT_POLICY):
    if days_in_month < 1 or not 0 <= current_day <= days_in_month:
        raise ValueError("current_day must lie within the month")

    income = monthly.monthly_income
    expenses = monthly.monthly_expenses
    savings = monthly.monthly_savings
    income_target = to_decimal(goal.monthly_income)
    expense_target = to_decimal(goal.monthly_expenses)
    savings_target = to_decimal(goal.savings_target)

    time_progress = percentage_of(current_day, days_in_month)
    income_progress = percentage_of(income, income_target)
    expense_progress = percentage_of(expenses, expense_target)
    savings_progress = percentage_of(savings, savings_target)

    remaining = {
        "income": max(ZERO, income_target - income),
        "expenses": max(ZERO, expense_target - expenses),
        "savings": max(ZERO, savings_target - savings),
    }
    days_left = days_in_month - current_day
    daily_targets = {
        key: (value / days_left if days_left > 0 else ZERO) for key, value in remaining.items()
    }

    categories = [
        evaluate_category(name, limit, monthly.category_totals.get(name, ZERO),
                          current_day, days_in_month, policy)
        for name, limit in goal.categories.items()
    ]
    categories.sort(key=lambda c: c.progress, reverse=True)

    return BudgetStatus(
        income_progress=income_progress,
        expense_progress=expense_progress,
        savings_progress=savings_progress,
        time_progress=time_progress,
        income_status=classify_income(income_progress, time_progress, policy) if income_target else NEUTRAL,
        expense_status=classify_expense(expense_progress, time_progress) if expense_target else NEUTRAL,
        savings_status=classify_income(savings_progress, time_progress, policy) if savings_target else NEUTRAL,
        income_on_track=project(income, current_day, days_in_month) >= income_target,
        expense_on_track=not expense_target or project(expenses, current_day, days_in_month) <= expense_target,
        savings_on_track=not savings_target or project(savings, current_day, days_in_month) >= savings_target,
        remaining=remaining,
        daily_targets=daily_targets,
        categories=categories,
    )

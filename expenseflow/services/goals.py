"""Persistence for budget goals and per-category limits."""
import logging
from datetime import date
from decimal import Decimal

from ..errors import ValidationError
from ..extensions import db
from ..models import BudgetGoal, CategoryLimit
from ..validation import clean_text, collect, parse_amount
from .aggregation import ZERO, month_bounds, to_decimal
from .budget import GoalTargets
from .transactions import category_totals, expense_total

logger = logging.getLogger(__name__)

# largest value a Numeric(12, 2) column holds
MAX_GOAL_AMOUNT = Decimal("9999999999.99")

GOAL_FIELDS = {
    "monthlyIncome": "monthly_income",
    "monthlyExpenses": "monthly_expenses",
    "savingsTarget": "savings_target",
}


def get_goal_targets(owner_id):
    goal = BudgetGoal.query.filter_by(user_id=owner_id).first()
    limits = CategoryLimit.query.filter_by(user_id=owner_id).order_by(CategoryLimit.category).all()
    return GoalTargets(
        monthly_income=to_decimal(goal.monthly_income) if goal else ZERO,
        monthly_expenses=to_decimal(goal.monthly_expenses) if goal else ZERO,
        savings_target=to_decimal(goal.savings_target) if goal else ZERO,
        categories={row.category: to_decimal(row.limit_amount) for row in limits},
    )


def save_goals(owner_id, payload, commit=True):
    """Apply the supplied goal fields; ``categories`` replaces every category limit."""
    if not isinstance(payload, dict):
        raise ValidationError("Budget goals must be a JSON object")

    errors = []
    values = {}
    for key, attr in GOAL_FIELDS.items():
        if key in payload:
            values[attr] = collect(errors, parse_amount, payload[key], key,
                                  maximum=MAX_GOAL_AMOUNT, allow_zero=True)

    limits = None
    if "categories" in payload:
        raw = payload["categories"]
        if not isinstance(raw, dict):
            errors.append({"field": "categories", "message": "categories must map names to limits"})
        else:
            limits = {}
            for name, limit in raw.items():
                clean = collect(errors, clean_text, name, "category", 50, required=True)
                amount = collect(errors, parse_amount, limit, f"categories.{name}", maximum=MAX_GOAL_AMOUNT)
                if clean is not None and amount is not None:
                    limits[clean] = amount
    if errors:
        raise ValidationError(details=errors)

    goal = BudgetGoal.query.filter_by(user_id=owner_id).first()
    if goal is None:
        goal = BudgetGoal(user_id=owner_id, monthly_income=ZERO, monthly_expenses=ZERO, savings_target=ZERO)
        db.session.add(goal)
    for attr, value in values.items():
        setattr(goal, attr, value)

    if limits is not None:
        CategoryLimit.query.filter_by(user_id=owner_id).delete(synchronize_session=False)
        for name, amount in limits.items():
            db.session.add(CategoryLimit(user_id=owner_id, category=name, limit_amount=amount))

    if commit:
        db.session.commit()
        logger.info("Saved budget goals for user %s", owner_id)
    return get_goal_targets(owner_id)


def check_budget(owner_id, amount, category=None, day=None):
    """Return a message if adding this expense would break a limit, else ``None``."""
    day = day or date.today()
    start, end = month_bounds(day.year, day.month)
    amount = to_decimal(amount)

    if category:
        limit = CategoryLimit.query.filter_by(user_id=owner_id, category=category).first()
        if limit:
            spent = to_decimal(category_totals(owner_id, start, end, category).get(category))
            if spent + amount > limit.limit_amount:
                left = max(ZERO, to_decimal(limit.limit_amount) - spent)
                return f"Adding this expense would exceed your budget for {category}. Remaining: {left:.2f}"

    goal = BudgetGoal.query.filter_by(user_id=owner_id).first()
    if goal and goal.monthly_expenses:
        spent = to_decimal(expense_total(owner_id, start, end))
        if spent + amount > goal.monthly_expenses:
            left = max(ZERO, to_decimal(goal.monthly_expenses) - spent)
            return f"Adding this expense would exceed your monthly budget. Remaining: {left:.2f}"
    return None

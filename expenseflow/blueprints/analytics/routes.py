from datetime import date
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from ...services.aggregation import (
    aggregate_day,
    aggregate_month,
    aggregate_trend,
    money,
    percent,
    percentage_change,
    previous_month,
    top_categories,
)
from ...categories import resolve_category
from ...validation import MAX_YEAR, MIN_YEAR, parse_int, parse_optional_date

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _ranked_categories(totals):
    ranked = top_categories(totals)
    for entry in ranked:
        display = resolve_category(entry["category"])
        entry.update(color=display.color, icon=display.icon)
    return ranked


def _viewed_date():
    return parse_optional_date(request.args.get("date"), default=date.today())


@analytics_bp.route("/dashboard")
@login_required
def dashboard():
    on = _viewed_date()
    daily = aggregate_day(current_user.id, on)
    monthly = aggregate_month(current_user.id, on.year, on.month, current_day=on.day)
    return jsonify({
        "date": on.isoformat(),
        "daily": {
            "income": money(daily.total_income),
            "expenses": money(daily.total_expenses),
            "balance": money(daily.balance),
            "transactionCount": daily.transaction_count,
        },
        "monthly": {
            "income": money(monthly.monthly_income),
            "expenses": money(monthly.monthly_expenses),
            "balance": money(monthly.monthly_savings),
            "transactionCount": monthly.transaction_count,
        },
        "categoryTotals": {name: money(v) for name, v in monthly.category_totals.items()},
        "topCategories": _ranked_categories(monthly.category_totals),
    })


@analytics_bp.route("/monthly")
@login_required
def monthly():
    year = parse_int(request.args.get("year"), "year", minimum=MIN_YEAR, maximum=MAX_YEAR)
    month = parse_int(request.args.get("month"), "month", minimum=1, maximum=12)
    return jsonify(aggregate_month(current_user.id, year, month).active_day_map())


@analytics_bp.route("/summary")
@login_required
def summary():
    on = _viewed_date()
    current = aggregate_month(current_user.id, on.year, on.month, current_day=on.day)
    prev_year, prev_month = previous_month(on.year, on.month)
    previous = aggregate_month(current_user.id, prev_year, prev_month)
    body = current.to_dict()
    body["comparison"] = {
        "previousIncome": money(previous.monthly_income),
        "previousExpenses": money(previous.monthly_expenses),
        "incomeChange": percent(percentage_change(current.monthly_income, previous.monthly_income)),
        "expenseChange": percent(percentage_change(current.monthly_expenses, previous.monthly_expenses)),
    }
    body["topCategories"] = _ranked_categories(current.category_totals)
    return jsonify(body)


@analytics_bp.route("/trends")
@login_required
def trends():
    days = parse_int(request.args.get("days"), "days", default=30, minimum=1, maximum=365)
    end = parse_optional_date(request.args.get("endDate"), "endDate", default=date.today())
    return jsonify([point.to_trend_point() for point in aggregate_trend(current_user.id, end, days)])

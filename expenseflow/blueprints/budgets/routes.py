from datetime import date
from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from ...services.aggregation import aggregate_month, money
from ...services.budget import BudgetPolicy, evaluate
from ...services.goals import check_budget, get_goal_targets, save_goals
from ...validation import clean_text, json_body, parse_amount, parse_optional_date

budgets_bp = Blueprint("budgets", __name__, url_prefix="/api/budget")


@budgets_bp.route("/goals", methods=["GET"])
@login_required
def goals():
    return jsonify(get_goal_targets(current_user.id).to_dict())


@budgets_bp.route("/goals", methods=["PUT"])
@login_required
def update_goals():
    targets = save_goals(current_user.id, json_body())
    return jsonify({"message": "Budget goals saved", "goals": targets.to_dict()})


@budgets_bp.route("/status", methods=["GET"])
@login_required
def status():
    on = parse_optional_date(request.args.get("date"), default=date.today())
    monthly = aggregate_month(current_user.id, on.year, on.month, current_day=on.day)
    targets = get_goal_targets(current_user.id)
    result = evaluate(monthly, targets, on.day, monthly.days_in_month,
                      BudgetPolicy.from_config(current_app.config))
    return jsonify({
        "month": on.strftime("%Y-%m"),
        "currentDay": on.day,
        "daysInMonth": monthly.days_in_month,
        "goals": targets.to_dict(),
        "actuals": {
            "income": money(monthly.monthly_income),
            "expenses": money(monthly.monthly_expenses),
            "savings": money(monthly.monthly_savings),
        },
        "status": result.to_dict(),
    })


@budgets_bp.route("/check", methods=["POST"])
@login_required
def check():
    data = json_body()
    amount = parse_amount(data.get("amount"), maximum=current_app.config["MAX_TRANSACTION_AMOUNT"])
    category = clean_text(data.get("category"), "category", 50)
    on = parse_optional_date(data.get("date"), default=date.today())
    msg = check_budget(current_user.id, amount, category, on)
    if msg:
        return jsonify({"ok": False, "message": msg})
    return jsonify({"ok": True, "message": "Within budget"})

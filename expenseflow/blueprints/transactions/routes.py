from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from ...errors import ValidationError
from ...models import KINDS
from ...services import transactions as store
from ...services.aggregation import money
from ...validation import json_body, parse_date, parse_int, parse_optional_date

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


def _date_range(required=True):
    start_raw, end_raw = request.args.get("startDate"), request.args.get("endDate")
    if required:
        start, end = parse_date(start_raw, "startDate"), parse_date(end_raw, "endDate")
    else:
        start, end = parse_optional_date(start_raw, "startDate"), parse_optional_date(end_raw, "endDate")
    if start and end and start > end:
        raise ValidationError.for_field("startDate", "startDate must not be after endDate")
    return start, end


@transactions_bp.route("", methods=["GET"])
@login_required
def list_transactions():
    page = parse_int(request.args.get("page"), "page", default=1, minimum=1)
    limit = parse_int(request.args.get("limit"), "limit", default=current_app.config["DEFAULT_PAGE_SIZE"],
                      minimum=1, maximum=current_app.config["MAX_PAGE_SIZE"])
    kind = request.args.get("type") or None
    if kind and kind not in KINDS:
        raise ValidationError.for_field("type", 'Type must be either "income" or "expense"')
    start, end = _date_range(required=False)

    filters = store.TransactionFilters(
        type=kind,
        category=request.args.get("category") or None,
        start=start,
        end=end,
        search=(request.args.get("search") or "").strip() or None,
    )
    result = store.list_transactions(current_user.id, filters, page, limit)
    return jsonify({
        "data": [t.to_dict() for t in result.items],
        "pagination": store.pagination_meta(result),
    })


@transactions_bp.route("/date/<day>", methods=["GET"])
@login_required
def by_date(day):
    on = parse_date(day)
    return jsonify([t.to_dict() for t in store.list_by_date(current_user.id, on)])


@transactions_bp.route("/range", methods=["GET"])
@login_required
def by_range():
    start, end = _date_range()
    return jsonify([t.to_dict() for t in store.list_by_range(current_user.id, start, end)])


@transactions_bp.route("", methods=["POST"])
@login_required
def create():
    txn = store.create_transaction(current_user.id, json_body())
    return jsonify(txn.to_dict()), 201


@transactions_bp.route("/<int:transaction_id>", methods=["GET"])
@login_required
def detail(transaction_id):
    return jsonify(store.get_transaction(current_user.id, transaction_id).to_dict())


@transactions_bp.route("/<int:transaction_id>", methods=["PUT"])
@login_required
def update(transaction_id):
    txn = store.update_transaction(current_user.id, transaction_id, request.get_json(silent=True))
    return jsonify(txn.to_dict())


@transactions_bp.route("/<int:transaction_id>", methods=["DELETE"])
@login_required
def delete(transaction_id):
    deleted = store.delete_transaction(current_user.id, transaction_id)
    return jsonify({"message": "Transaction deleted successfully", "id": deleted})


@transactions_bp.route("/bulk", methods=["DELETE"])
@login_required
def bulk_delete():
    deleted = store.delete_transactions(current_user.id, json_body().get("ids"))
    return jsonify({
        "message": f"{len(deleted)} transactions deleted successfully",
        "count": len(deleted),
        "deletedIds": deleted,
    })


@transactions_bp.route("/categories", methods=["GET"])
@login_required
def categories():
    return jsonify(store.categories_in_use(current_user.id))


@transactions_bp.route("/category-totals", methods=["GET"])
@login_required
def category_totals():
    start, end = _date_range()
    totals = store.category_totals(current_user.id, start, end)
    return jsonify({name: money(total) for name, total in totals.items()})

"""Owner-scoped persistence for income and expense records.

Every query here filters on ``user_id`` as well as the record id, so a
record that exists but belongs to someone else is reported exactly like a
missing one.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from flask import current_app
from sqlalchemy import func, or_

from ..categories import DEFAULT_CATEGORIES
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import EXPENSE, INCOME, KINDS, Transaction
from ..validation import clean_text, collect, parse_amount, parse_date

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("type", "amount", "date", "description", "source", "category", "notes")


@dataclass
class TransactionFilters:
    type: Optional[str] = None
    category: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    search: Optional[str] = None


def _validated_fields(data):
    """Validate a full transaction payload and map it onto model attributes."""
    errors = []
    kind = data.get("type")
    if kind not in KINDS:
        errors.append({"field": "type", "message": 'Type must be either "income" or "expense"'})
    amount = collect(errors, parse_amount, data.get("amount"),
                     maximum=current_app.config["MAX_TRANSACTION_AMOUNT"])
    raw_date = data.get("date")
    occurred_on = date.today() if raw_date in (None, "") else collect(errors, parse_date, raw_date)
    description = collect(errors, clean_text, data.get("description"), "description", 255,
                          required=kind == EXPENSE)
    source = collect(errors, clean_text, data.get("source"), "source", 100, required=kind == INCOME)
    category = collect(errors, clean_text, data.get("category"), "category", 50)
    notes = collect(errors, clean_text, data.get("notes"), "notes", 500)
    if errors:
        raise ValidationError(details=errors)
    return {
        "type": kind,
        "amount": amount,
        "occurred_on": occurred_on,
        "description": description,
        "source": source,
        # categories only classify spending
        "category": category if kind == EXPENSE else None,
        "notes": notes,
    }


def create_transaction(owner_id, payload, commit=True):
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    fields = _validated_fields(payload)
    txn = Transaction(user_id=owner_id, **fields)
    db.session.add(txn)
    if commit:
        db.session.commit()
        logger.info("Created %s transaction %s for user %s", txn.type, txn.id, owner_id)
    return txn


def get_transaction(owner_id, transaction_id):
    txn = Transaction.query.filter_by(id=transaction_id, user_id=owner_id).first()
    if txn is None:
        raise NotFoundError("Transaction not found")
    return txn


def update_transaction(owner_id, transaction_id, payload):
    txn = get_transaction(owner_id, transaction_id)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    changes = {key: payload[key] for key in UPDATABLE_FIELDS if key in payload}
    if not changes:
        raise ValidationError("No valid fields to update")
    if "date" in changes and changes["date"] in (None, ""):
        raise ValidationError.for_field("date", "Date cannot be empty")

    merged = {
        "type": txn.type,
        "amount": txn.amount,
        "date": txn.occurred_on,
        "description": txn.description,
        "source": txn.source,
        "category": txn.category,
        "notes": txn.notes,
    }
    merged.update(changes)
    for attr, value in _validated_fields(merged).items():
        setattr(txn, attr, value)
    txn.updated_at = datetime.utcnow()
    db.session.commit()
    logger.info("Updated transaction %s for user %s (%s)", txn.id, owner_id, ", ".join(sorted(changes)))
    return txn


def delete_transaction(owner_id, transaction_id):
    txn = get_transaction(owner_id, transaction_id)
    db.session.delete(txn)
    db.session.commit()
    logger.info("Deleted transaction %s for user %s", transaction_id, owner_id)
    return transaction_id


def delete_transactions(owner_id, ids):
    """Delete the listed ids that belong to the owner and return those ids.

    Ids that are missing or owned by another user are skipped.
    """
    if (not isinstance(ids, list) or not ids
            or any(isinstance(i, bool) or not isinstance(i, int) or i < 1 for i in ids)):
        raise ValidationError.for_field("ids", "ids must be a non-empty list of positive integers")

    owned = {
        row.id for row in db.session.query(Transaction.id)
        .filter(Transaction.user_id == owner_id, Transaction.id.in_(ids))
    }
    deleted = [i for i in dict.fromkeys(ids) if i in owned]
    if deleted:
        Transaction.query.filter(
            Transaction.user_id == owner_id, Transaction.id.in_(deleted)
        ).delete(synchronize_session=False)
        db.session.commit()
    logger.info("Bulk deleted %d of %d transactions for user %s", len(deleted), len(ids), owner_id)
    return deleted


def _like_pattern(term):
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _newest_first(query):
    return query.order_by(
        Transaction.occurred_on.desc(), Transaction.created_at.desc(), Transaction.id.desc()
    )


def filtered_query(owner_id, filters=None):
    filters = filters or TransactionFilters()
    query = Transaction.query.filter(Transaction.user_id == owner_id)
    if filters.type:
        query = query.filter(Transaction.type == filters.type)
    if filters.category:
        query = query.filter(Transaction.category == filters.category)
    if filters.start:
        query = query.filter(Transaction.occurred_on >= filters.start)
    if filters.end:
        query = query.filter(Transaction.occurred_on <= filters.end)
    if filters.search:
        pattern = _like_pattern(filters.search.strip())
        query = query.filter(or_(
            Transaction.description.ilike(pattern, escape="\\"),
            Transaction.source.ilike(pattern, escape="\\"),
        ))
    return query


def list_transactions(owner_id, filters=None, page=1, page_size=50):
    """Return a Flask-SQLAlchemy ``Pagination`` of the owner's records, newest first."""
    return _newest_first(filtered_query(owner_id, filters)).paginate(
        page=page, per_page=page_size, error_out=False
    )


def pagination_meta(pagination):
    return {
        "page": pagination.page,
        "limit": pagination.per_page,
        "total": pagination.total,
        "totalPages": pagination.pages,
        "hasNext": pagination.has_next,
        "hasPrev": pagination.has_prev,
    }


def list_by_date(owner_id, day):
    return _newest_first(
        Transaction.query.filter(Transaction.user_id == owner_id, Transaction.occurred_on == day)
    ).all()


def list_by_range(owner_id, start, end):
    return _newest_first(filtered_query(owner_id, TransactionFilters(start=start, end=end))).all()


def categories_in_use(owner_id):
    rows = (
        db.session.query(Transaction.category)
        .filter(
            Transaction.user_id == owner_id,
            Transaction.category.isnot(None),
            Transaction.category != "",
        )
        .distinct()
        .order_by(Transaction.category)
        .all()
    )
    return list(dict.fromkeys(DEFAULT_CATEGORIES + [name for (name,) in rows]))


def category_totals(owner_id, start, end, category=None):
    """Sum expense amounts per category between two dates, largest first."""
    total = func.sum(Transaction.amount)
    query = (
        db.session.query(Transaction.category, total)
        .filter(
            Transaction.user_id == owner_id,
            Transaction.type == EXPENSE,
            Transaction.category.isnot(None),
            Transaction.occurred_on >= start,
            Transaction.occurred_on <= end,
        )
    )
    if category:
        query = query.filter(Transaction.category == category)
    return {name: amount for name, amount in query.group_by(Transaction.category).order_by(total.desc()).all()}


def expense_total(owner_id, start, end):
    return (
        db.session.query(func.coalesce(func.sum(Transaction.amount), 0))
        .filter(
            Transaction.user_id == owner_id,
            Transaction.type == EXPENSE,
            Transaction.occurred_on >= start,
            Transaction.occurred_on <= end,
        )
        .scalar()
    )

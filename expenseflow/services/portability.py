"""JSON/CSV export of an owner's data and best-effort import."""
import csv
import json
import logging
from datetime import datetime
from io import StringIO

from ..errors import ValidationError
from ..extensions import db
from ..models import Transaction, UserSettings
from .goals import get_goal_targets, save_goals
from .transactions import create_transaction

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"
CSV_COLUMNS = ["type", "amount", "date", "description", "source", "category", "notes"]


def get_settings(owner_id):
    row = UserSettings.query.filter_by(user_id=owner_id).first()
    return dict(row.settings) if row else {}


def save_settings(owner_id, settings, commit=True):
    """Shallow-merge ``settings`` into the stored document."""
    if not isinstance(settings, dict):
        raise ValidationError.for_field("settings", "settings must be a JSON object")
    row = UserSettings.query.filter_by(user_id=owner_id).first()
    if row is None:
        row = UserSettings(user_id=owner_id, settings={})
        db.session.add(row)
    row.settings = {**(row.settings or {}), **settings}
    if commit:
        db.session.commit()
    return dict(row.settings)


def _all_transactions(owner_id):
    return (
        Transaction.query.filter_by(user_id=owner_id)
        .order_by(Transaction.occurred_on.desc(), Transaction.created_at.desc())
        .all()
    )


def export_snapshot(user):
    return {
        "user": {"id": user.id, "name": user.name, "email": user.email},
        "transactions": [t.to_dict() for t in _all_transactions(user.id)],
        "settings": get_settings(user.id),
        "budgetGoals": get_goal_targets(user.id).to_dict(),
        "exportDate": datetime.utcnow().isoformat() + "Z",
        "version": EXPORT_VERSION,
    }


def export_csv(owner_id):
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for t in _all_transactions(owner_id):
        writer.writerow([t.type, f"{t.amount:.2f}", t.occurred_on.isoformat(), t.description or "",
                         t.source or "", t.category or "", t.notes or ""])
    return output.getvalue()


def parse_upload(filename, content):
    """Decode an uploaded JSON snapshot or CSV file into a snapshot-shaped dict."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError.for_field("file", "File must be UTF-8 encoded")

    if (filename or "").lower().endswith(".csv"):
        rows = [
            {key: (value if value != "" else None) for key, value in row.items() if key}
            for row in csv.DictReader(StringIO(text))
        ]
        return {"transactions": rows}

    try:
        data = json.loads(text)
    except ValueError:
        raise ValidationError.for_field("file", "Invalid file format")
    if not isinstance(data, dict) or not isinstance(data.get("transactions"), list):
        raise ValidationError.for_field("file", "Invalid file format")
    return data


def _normalize_row(row):
    if not isinstance(row, dict):
        raise ValidationError("Row must be an object")
    data = {key: row.get(key) for key in CSV_COLUMNS}
    # older exports used transaction_date
    if data["date"] is None:
        data["date"] = row.get("transaction_date")
    if isinstance(data["date"], str) and "T" in data["date"]:
        data["date"] = data["date"].split("T", 1)[0]
    return data


def import_snapshot(owner_id, data):
    """Insert every valid row; invalid rows are logged and counted, not fatal."""
    imported = failed = 0
    for index, row in enumerate(data.get("transactions", []), start=1):
        try:
            create_transaction(owner_id, _normalize_row(row), commit=False)
        except ValidationError as err:
            failed += 1
            logger.warning("Skipping import row %d for user %s: %s", index, owner_id, err.details or err.message)
            continue
        imported += 1

    if isinstance(data.get("settings"), dict):
        save_settings(owner_id, data["settings"], commit=False)
    if isinstance(data.get("budgetGoals"), dict):
        try:
            save_goals(owner_id, data["budgetGoals"], commit=False)
        except ValidationError as err:
            logger.warning("Ignoring budget goals in import for user %s: %s", owner_id, err.details)

    db.session.commit()
    logger.info("Imported %d transactions for user %s (%d rows skipped)", imported, owner_id, failed)
    return {"importedTransactions": imported, "failedTransactions": failed}

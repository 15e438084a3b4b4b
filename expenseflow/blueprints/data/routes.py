from datetime import date
from flask import Blueprint, jsonify, make_response, request
from flask_login import login_required, current_user
from ...errors import ValidationError
from ...services.portability import (
    export_csv,
    export_snapshot,
    get_settings,
    import_snapshot,
    parse_upload,
    save_settings,
)
from ...validation import json_body

data_bp = Blueprint("data", __name__, url_prefix="/api")


@data_bp.route("/settings", methods=["GET"])
@login_required
def settings():
    return jsonify({"settings": get_settings(current_user.id)})


@data_bp.route("/settings", methods=["PUT"])
@login_required
def update_settings():
    merged = save_settings(current_user.id, json_body().get("settings"))
    return jsonify({"message": "Settings updated successfully", "settings": merged})


@data_bp.route("/export", methods=["GET"])
@login_required
def export():
    stamp = date.today().isoformat()
    if request.args.get("format") == "csv":
        response = make_response(export_csv(current_user.id))
        response.headers["Content-Type"] = "text/csv"
        response.headers["Content-Disposition"] = f"attachment; filename=expenseflow-{stamp}.csv"
        return response
    response = jsonify(export_snapshot(current_user))
    response.headers["Content-Disposition"] = f'attachment; filename="expenseflow-backup-{stamp}.json"'
    return response


@data_bp.route("/import", methods=["POST"])
@login_required
def import_data():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError.for_field("file", "No file uploaded")
    if not upload.filename.lower().endswith((".json", ".csv")):
        raise ValidationError.for_field("file", "Invalid file type. Only JSON and CSV files are allowed.")
    snapshot = parse_upload(upload.filename, upload.read())
    result = import_snapshot(current_user.id, snapshot)
    return jsonify({"message": "Data imported successfully", **result})

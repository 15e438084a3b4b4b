import logging
import re
from datetime import datetime
from flask import Blueprint, g, jsonify
from flask_login import login_required, current_user
from ...errors import AuthError, ConflictError, ValidationError
from ...extensions import db, login_manager
from ...models import User
from ...validation import json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _text(data, key):
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


@login_manager.request_loader
def load_user_from_request(req):
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    user, error = User.verify_token(token.strip())
    if user is None:
        g.auth_error = error or "unknown"
    return user


@login_manager.unauthorized_handler
def unauthorized():
    error = g.pop("auth_error", None)
    if error == "expired":
        raise AuthError("Token expired", status_code=403)
    if error == "invalid":
        raise AuthError("Invalid token", status_code=403)
    if error:
        raise AuthError("Invalid token")
    raise AuthError()


@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    name = _text(data, "name")
    email = _text(data, "email").lower()
    password = data.get("password") if isinstance(data.get("password"), str) else ""
    if not all([name, email, password]):
        raise ValidationError("Name, email, and password are required")
    if not EMAIL_RE.match(email):
        raise ValidationError.for_field("email", "Invalid email address")
    if len(password) < 6:
        raise ValidationError.for_field("password", "Password must be at least 6 characters long")
    if User.query.filter_by(email=email).first():
        raise ConflictError("User with this email already exists")

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)
    return jsonify({
        "message": "User created successfully",
        "user": user.to_dict(),
        "token": user.generate_token(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    email = _text(data, "email").lower()
    password = data.get("password") if isinstance(data.get("password"), str) else ""
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        raise AuthError("Invalid credentials")
    user.last_login = datetime.utcnow()
    db.session.commit()
    return jsonify({"message": "Login successful", "user": user.to_dict(), "token": user.generate_token()})


@auth_bp.route("/profile", methods=["GET"])
@login_required
def profile():
    return jsonify({"user": current_user.to_dict()})


@auth_bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    data = json_body()
    name = _text(data, "name")
    if not name:
        raise ValidationError.for_field("name", "Name is required")
    current_user.name = name
    db.session.commit()
    return jsonify({"message": "Profile updated successfully", "user": current_user.to_dict()})

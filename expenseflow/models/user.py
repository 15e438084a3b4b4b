from datetime import datetime
from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db

TOKEN_SALT = "expenseflow-auth"


class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    transactions = db.relationship("Transaction", backref="user", lazy=True, cascade="all, delete-orphan")
    budget_goal = db.relationship("BudgetGoal", backref="user", uselist=False, cascade="all, delete-orphan")
    category_limits = db.relationship("CategoryLimit", backref="user", lazy=True, cascade="all, delete-orphan")
    settings = db.relationship("UserSettings", backref="user", uselist=False, cascade="all, delete-orphan")

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @staticmethod
    def _serializer():
        return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)

    def generate_token(self) -> str:
        return self._serializer().dumps({"user_id": self.id})

    @classmethod
    def verify_token(cls, token: str):
        """Return ``(user, error)``; ``error`` is ``"expired"`` or ``"invalid"`` on failure."""
        try:
            data = cls._serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
        except SignatureExpired:
            return None, "expired"
        except BadSignature:
            return None, "invalid"
        user_id = data.get("user_id") if isinstance(data, dict) else None
        user = db.session.get(cls, user_id) if isinstance(user_id, int) else None
        return user, None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }

from decimal import Decimal
from ..extensions import db


class BudgetGoal(db.Model):
    __tablename__ = "budget_goals"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    monthly_income = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0"))
    monthly_expenses = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0"))
    savings_target = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0"))

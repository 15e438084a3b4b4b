from datetime import date, datetime
from ..extensions import db

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)


class Transaction(db.Model):
    __tablename__ = "transactions"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    type = db.Column(db.String(10), nullable=False)  # income/expense
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    occurred_on = db.Column(db.Date, default=date.today, nullable=False, index=True)
    description = db.Column(db.String(255))  # expenses
    source = db.Column(db.String(100))  # income
    category = db.Column(db.String(50))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def label(self):
        return self.description if self.type == EXPENSE else self.source

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "amount": float(self.amount),
            "date": self.occurred_on.isoformat(),
            "description": self.description,
            "source": self.source,
            "category": self.category,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

from ..extensions import db


class CategoryLimit(db.Model):
    __tablename__ = "category_limits"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    limit_amount = db.Column(db.Numeric(12, 2), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "category", name="uq_user_category_limit"),
    )

from datetime import date, timedelta
import click
from flask.cli import with_appcontext
from .extensions import db
from .models import Transaction, User
from .services.goals import save_goals


@click.command("seed-demo")
@click.option("--email", required=True, help="Email of an existing user to seed.")
@with_appcontext
def seed_demo(email):
    """Seed sample income, expenses and budget goals for the current month."""
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        raise click.ClickException(f"No user with email {email}")

    today = date.today()
    first = today.replace(day=1)
    if Transaction.query.filter_by(user_id=user.id).first():
        click.echo("User already has transactions; skipping demo rows")
    else:
        demo = [
            ("expense", 250, "Lunch", "Food", 0),
            ("expense", 320, "Cab", "Transport", 1),
            ("expense", 1800, "Electricity Bill", "Bills", 2),
            ("expense", 2200, "Shoes", "Shopping", 3),
            ("income", 50000, "Monthly Salary", None, 0),
            ("income", 6000, "Side Gig", None, 2),
        ]
        for kind, amount, label, category, offset in demo:
            on = min(first + timedelta(days=offset), today)
            db.session.add(Transaction(
                user_id=user.id,
                type=kind,
                amount=amount,
                occurred_on=on,
                description=label if kind == "expense" else None,
                source=label if kind == "income" else None,
                category=category,
            ))

    save_goals(user.id, {
        "monthlyIncome": 50000,
        "monthlyExpenses": 35000,
        "savingsTarget": 15000,
        "categories": {"Food": 8000, "Transport": 5000, "Shopping": 4000, "Bills": 8000},
    })
    click.echo(f"Demo data seeded for {user.email}")


def register_commands(app):
    app.cli.add_command(seed_demo)

from __future__ import annotations

from datetime import date
from decimal import Decimal

from expenseflow.models import User
from expenseflow.services.aggregation import aggregate_day, aggregate_month


def test_dashboard_for_single_expense(client, auth_headers, add_txn):
    add_txn(auth_headers, amount=300, category="Food", date="2024-03-05")
    resp = client.get("/api/analytics/dashboard?date=2024-03-05", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["date"] == "2024-03-05"
    assert body["daily"] == {"income": 0.0, "expenses": 300.0, "balance": -300.0, "transactionCount": 1}
    assert body["monthly"]["expenses"] == 300.0
    assert body["categoryTotals"] == {"Food": 300.0}
    assert body["topCategories"] == [
        {"category": "Food", "amount": 300.0, "percentage": 100.0, "color": "#ef4444", "icon": "🍽️"},
    ]


def test_top_categories_fall_back_for_custom_names(client, auth_headers, add_txn):
    add_txn(auth_headers, amount=30, category="Pets", date="2024-03-05")
    body = client.get("/api/analytics/summary?date=2024-03-05", headers=auth_headers).get_json()
    assert body["topCategories"][0]["color"] == "#6b7280"


def test_aggregate_day_reads_only_that_day(app, auth_headers, add_txn):
    add_txn(auth_headers, amount=300, category="Food", date="2024-03-05")
    add_txn(auth_headers, amount=20, category="Food", date="2024-03-06")
    with app.app_context():
        owner = User.query.filter_by(email="alice@example.com").one()
        daily = aggregate_day(owner.id, date(2024, 3, 5))
        monthly = aggregate_month(owner.id, 2024, 3)
    assert daily.total_expenses == Decimal("300")
    assert daily.category_totals == {"Food": Decimal("300")}
    assert monthly.monthly_expenses == Decimal("320")


def test_dashboard_empty_owner(client, auth_headers):
    body = client.get("/api/analytics/dashboard?date=2024-03-05", headers=auth_headers).get_json()
    assert body["daily"]["transactionCount"] == 0
    assert body["monthly"] == {"income": 0.0, "expenses": 0.0, "balance": 0.0, "transactionCount": 0}
    assert body["topCategories"] == []


def test_dashboard_is_owner_scoped(client, register, add_txn):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    add_txn(alice, amount=300, date="2024-03-05")
    body = client.get("/api/analytics/dashboard?date=2024-03-05", headers=bob).get_json()
    assert body["daily"]["expenses"] == 0.0


def test_dashboard_rejects_bad_date(client, auth_headers):
    assert client.get("/api/analytics/dashboard?date=yesterday", headers=auth_headers).status_code == 400


def test_monthly_active_days(client, auth_headers, add_txn):
    add_txn(auth_headers, amount=10, date="2024-02-29")
    add_txn(auth_headers, type="income", source="Pay", description=None, amount=90, date="2024-02-29")
    add_txn(auth_headers, amount=5, date="2024-02-03")
    add_txn(auth_headers, amount=5, date="2024-03-01")
    resp = client.get("/api/analytics/monthly?year=2024&month=2", headers=auth_headers)
    assert resp.get_json() == {
        "2024-02-03": {"income": 0.0, "expenses": 5.0},
        "2024-02-29": {"income": 90.0, "expenses": 10.0},
    }


def test_monthly_requires_valid_year_and_month(client, auth_headers):
    for query in ("year=2024", "month=3", "year=2024&month=13", "year=1800&month=1"):
        assert client.get(f"/api/analytics/monthly?{query}", headers=auth_headers).status_code == 400


def test_summary_compares_previous_month(client, auth_headers, add_txn):
    add_txn(auth_headers, amount=100, category="Food", date="2024-02-10")
    add_txn(auth_headers, amount=150, category="Food", date="2024-03-10")
    add_txn(auth_headers, type="income", source="Pay", description=None, amount=1000, date="2024-03-01")
    body = client.get("/api/analytics/summary?date=2024-03-15", headers=auth_headers).get_json()
    assert body["monthlyExpenses"] == 150.0
    assert body["monthlySavings"] == 850.0
    assert body["currentDay"] == 15
    assert body["daysInMonth"] == 31
    assert body["projectedExpenses"] == 310.0
    assert len(body["dailyTotals"]) == 31
    assert body["comparison"] == {
        "previousIncome": 0.0,
        "previousExpenses": 100.0,
        "incomeChange": 100.0,
        "expenseChange": 50.0,
    }
    assert body["topCategories"][0]["category"] == "Food"


def test_trends_window(client, auth_headers, add_txn):
    add_txn(auth_headers, amount=40, date="2024-03-04")
    add_txn(auth_headers, amount=99, date="2024-02-01")
    resp = client.get("/api/analytics/trends?days=7&endDate=2024-03-05", headers=auth_headers)
    series = resp.get_json()
    assert len(series) == 7
    assert series[0]["date"] == "2024-02-28"
    assert series[-1]["date"] == "2024-03-05"
    assert sum(p["expenses"] for p in series) == 40.0


def test_trends_default_and_limits(client, auth_headers):
    assert len(client.get("/api/analytics/trends", headers=auth_headers).get_json()) == 30
    assert client.get("/api/analytics/trends?days=0", headers=auth_headers).status_code == 400
    assert client.get("/api/analytics/trends?days=366", headers=auth_headers).status_code == 400


def test_summary_rejects_dates_outside_supported_years(client, auth_headers):
    assert client.get("/api/analytics/summary?date=0001-01-15", headers=auth_headers).status_code == 400
    assert client.get("/api/analytics/dashboard?date=9999-12-31", headers=auth_headers).status_code == 400


def test_summary_at_lower_year_bound(client, auth_headers):
    body = client.get("/api/analytics/summary?date=1970-01-15", headers=auth_headers).get_json()
    assert body["comparison"]["previousExpenses"] == 0.0


def test_trends_reject_dates_outside_supported_years(client, auth_headers):
    resp = client.get("/api/analytics/trends?endDate=0001-01-05&days=30", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "endDate"
    series = client.get("/api/analytics/trends?endDate=1970-01-05&days=365", headers=auth_headers).get_json()
    assert series[0]["date"] == "1969-01-06"

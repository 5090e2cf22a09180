from datetime import datetime, timedelta, timezone

import pytest

from allowance_tracker.api.server import create_app
from allowance_tracker.models.records import to_epoch_ms

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client(tmp_path):
    app = create_app(db_url=f"sqlite:///{tmp_path / 'api.db'}", clock=lambda: NOW)
    app.config["TESTING"] = True
    return app.test_client()


def post_tx(client, **overrides):
    payload = {"title": "Lunch", "amount": 60, "type": "expense", "category": "Food & Snacks"}
    payload.update(overrides)
    return client.post("/api/transactions", json=payload)


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_create_transaction(client):
    resp = post_tx(client)
    assert resp.status_code == 201
    body = resp.get_json()["transaction"]
    assert body["id"] == str(to_epoch_ms(NOW))
    assert body["timestamp"] == str(to_epoch_ms(NOW))
    assert body["date"] == "3/10/2025"
    assert body["type"] == "expense"


@pytest.mark.parametrize("payload", [
    {"amount": 60, "type": "expense", "category": "Food & Snacks"},
    {"title": "Lunch", "type": "expense", "category": "Food & Snacks"},
    {"title": "Lunch", "amount": 60, "type": "expense"},
])
def test_create_transaction_missing_fields(client, payload):
    resp = client.post("/api/transactions", json=payload)
    assert resp.status_code == 400
    assert "Missing required fields" in resp.get_json()["error"]


def test_create_transaction_invalid_values(client):
    assert post_tx(client, amount="-3").status_code == 400
    assert post_tx(client, type="refund").status_code == 400
    assert post_tx(client, category="Gadgets").status_code == 400


@pytest.mark.parametrize("field, value", [
    ("title", 5),
    ("type", 1),
    ("category", ["Food & Snacks"]),
    ("amount", [60]),
])
def test_create_transaction_rejects_non_text_fields(client, field, value):
    resp = post_tx(client, **{field: value})
    assert resp.status_code == 400
    assert "attribute" not in resp.get_json()["error"]
    assert client.get("/api/transactions").get_json() == []


def test_date_follows_supplied_timestamp(client):
    resp = post_tx(client, timestamp=to_epoch_ms(NOW - timedelta(days=3)))
    assert resp.get_json()["transaction"]["date"] == "3/7/2025"


def test_list_newest_first_and_get(client):
    post_tx(client, title="Old", timestamp=to_epoch_ms(NOW - timedelta(days=1)), id="old")
    post_tx(client, title="New")

    listed = client.get("/api/transactions").get_json()
    assert [t["title"] for t in listed] == ["New", "Old"]

    one = client.get("/api/transactions/old")
    assert one.status_code == 200
    assert one.get_json()["title"] == "Old"


def test_duplicate_id_is_rejected(client):
    post_tx(client, id="abc")
    resp = post_tx(client, id="abc")
    assert resp.status_code == 400


def test_missing_transaction_is_404(client):
    assert client.get("/api/transactions/nope").status_code == 404
    assert client.put("/api/transactions/nope", json={"title": "x"}).status_code == 404
    resp = client.delete("/api/transactions/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Transaction not found"


def test_update_and_delete(client):
    tx_id = post_tx(client).get_json()["transaction"]["id"]

    resp = client.put(f"/api/transactions/{tx_id}", json={"amount": "75.5", "category": "Projects"})
    assert resp.status_code == 200
    updated = resp.get_json()["transaction"]
    assert updated["amount"] == 75.5
    assert updated["category"] == "Projects"

    assert client.delete(f"/api/transactions/{tx_id}").status_code == 200
    assert client.delete(f"/api/transactions/{tx_id}").status_code == 404


def test_summary(client):
    post_tx(client, title="Allowance", amount=500, type="income", category="Allowance")
    post_tx(client, title="Piggy bank", amount=100, category="Savings")
    post_tx(client, amount=60)

    summary = client.get("/api/summary").get_json()
    assert summary == {"totalIncome": 500, "totalExpense": 160, "totalSavings": 100, "balance": 340}


def test_budget_get_creates_default_and_post_coerces(client):
    budget = client.get("/api/budget").get_json()
    assert budget["userId"] == "default"
    assert budget["weeklyAllowance"] == 0

    resp = client.post("/api/budget", json={"dailyAllowance": "100", "food": "50", "load": "lots"})
    assert resp.status_code == 200
    saved = resp.get_json()["budget"]
    assert saved["weeklyAllowance"] == 700
    assert saved["food"] == 50
    assert saved["load"] == 0


def test_statistics(client):
    post_tx(client, amount=40, timestamp=to_epoch_ms(NOW - timedelta(days=3)))
    post_tx(client, amount=20, timestamp=to_epoch_ms(NOW - timedelta(days=20)))
    post_tx(client, amount=300, type="income", category="Allowance")

    weekly = client.get("/api/statistics/weekly").get_json()
    assert weekly["totalSpent"] == 40
    assert weekly["totalIncome"] == 300
    assert weekly["transactionCount"] == 2
    assert weekly["byCategory"] == {"Food & Snacks": 40}

    monthly = client.get("/api/statistics/monthly").get_json()
    assert monthly["totalSpent"] == 60


def test_statistics_invalid_period(client):
    resp = client.get("/api/statistics/yearly")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid period"


def test_notifications(client):
    client.post("/api/budget", json={"dailyAllowance": 100, "food": 50, "transportation": 20})
    post_tx(client, amount=400, timestamp=to_epoch_ms(NOW - timedelta(days=1)))
    post_tx(client, title="Fare", amount=120, category="Transportation",
            timestamp=to_epoch_ms(NOW - timedelta(days=2)))

    body = client.get("/api/notifications").get_json()
    by_cat = {n["category"]: n for n in body["notifications"]}

    assert by_cat["food"]["type"] == "alert"
    assert by_cat["food"]["percentage"] == "114"
    assert by_cat["food"]["remaining"] == -50
    assert by_cat["transportation"]["type"] == "warning"
    assert body["insights"]["totalSpent"] == 520
    assert body["insights"]["weeklySpending"] == {"food": 400, "transportation": 120}
    assert body["insights"]["availableBalance"] == 180
    assert body["insights"]["budget"]["food"] == 50


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/unknown")
    assert resp.status_code == 404
    assert "error" in resp.get_json()

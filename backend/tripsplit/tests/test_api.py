"""
Tests for expense and settlement endpoints.
"""
from decimal import Decimal
from fastapi.testclient import TestClient
from tripsplit.main import app

client = TestClient(app)


def _expense(expense_id, payer_id, amount, participants, currency="USD", **extra):
    body = {
        "id": expense_id,
        "payer_id": payer_id,
        "amount": amount,
        "currency": currency,
        "participant_weights": {p: "1" for p in participants},
    }
    body.update(extra)
    return body


TRIP = [
    _expense("e1", "alice", "90.00", ["alice", "bob", "carol"], category="food"),
    _expense("e2", "bob", "30.00", ["bob", "carol"]),
]


def test_health():
    """Test health endpoints."""
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "healthy"}


def test_expense_shares():
    """Test share computation for an equal split."""
    response = client.post(
        "/api/expenses/shares",
        json=_expense("e1", "alice", "100.00", ["alice", "bob", "carol"], currency="usd")
    )

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "USD"
    assert data["decimal_places"] == 2
    assert {k: Decimal(v) for k, v in data["shares"].items()} == {
        "alice": Decimal("33.33"),
        "bob": Decimal("33.33"),
        "carol": Decimal("33.33"),
    }
    assert Decimal(data["residue"]) == Decimal("0.01")


def test_expense_shares_invalid_split():
    """Test that an equal split with uneven weights is rejected."""
    body = _expense("e1", "alice", "30.00", ["alice"])
    body["participant_weights"] = {"alice": "1", "bob": "2"}

    response = client.post("/api/expenses/shares", json=body)

    assert response.status_code == 422
    assert response.json()["details"] == "InvalidSplitConfiguration"
    assert "equal split" in response.json()["error"]


def test_expense_shares_rejects_non_positive_amount():
    response = client.post("/api/expenses/shares", json=_expense("e1", "alice", "0", ["alice"]))

    assert response.status_code == 422


def test_expense_validate():
    """Test validation report for an itemized expense that does not add up."""
    body = _expense(
        "e1", "alice", "100.00", [],
        split_type="itemized",
        participant_amounts={"alice": "25.00", "bob": "70.00"}
    )

    response = client.post("/api/expenses/validate", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert len(data["issues"]) == 1


def test_compute_settlement():
    """Test full settlement for the three-person trip."""
    response = client.post("/api/settlement/compute", json={"expenses": TRIP})

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "USD"
    assert [s["participant_id"] for s in data["summaries"]] == ["alice", "bob", "carol"]
    assert [Decimal(s["net"]) for s in data["summaries"]] == [Decimal("60"), Decimal("-15"), Decimal("-45")]
    assert len(data["pairwise_debts"]) == 3
    assert [(t["from_id"], t["to_id"], Decimal(t["amount"])) for t in data["transfers"]] == [
        ("carol", "alice", Decimal("45")),
        ("bob", "alice", Decimal("15")),
    ]


def test_compute_settlement_with_settled_transfers():
    response = client.post(
        "/api/settlement/compute",
        json={
            "expenses": TRIP,
            "settled_transfers": [{"from_id": "carol", "to_id": "alice", "amount": "45.00"}],
        }
    )

    assert response.status_code == 200
    transfers = response.json()["transfers"]
    assert [(t["from_id"], t["to_id"]) for t in transfers] == [("bob", "alice")]


def test_compute_settlement_rejects_negative_settled_transfer():
    """Test that a negative settled payment cannot inflate a debt."""
    response = client.post(
        "/api/settlement/compute",
        json={
            "expenses": TRIP,
            "settled_transfers": [{"from_id": "carol", "to_id": "alice", "amount": "-100"}],
        }
    )

    assert response.status_code == 422
    assert response.json()["details"] == "InvalidSettledTransfer"


def test_compute_settlement_rejects_unknown_settled_participant():
    response = client.post(
        "/api/settlement/compute",
        json={
            "expenses": TRIP,
            "settled_transfers": [{"from_id": "carol", "to_id": "zoe", "amount": "45"}],
        }
    )

    assert response.status_code == 422
    assert response.json()["details"] == "InvalidSettledTransfer"
    assert "zoe" in response.json()["error"]


def test_compute_settlement_empty():
    response = client.post("/api/settlement/compute", json={"expenses": []})

    assert response.status_code == 200
    data = response.json()
    assert data["summaries"] == []
    assert data["pairwise_debts"] == []
    assert data["transfers"] == []


def test_compute_settlement_mixed_currencies():
    """Test that mixing currencies in one settlement is rejected."""
    expenses = TRIP + [_expense("e3", "alice", "3000", ["alice", "bob"], currency="JPY")]

    response = client.post("/api/settlement/compute", json={"expenses": expenses})

    assert response.status_code == 422
    assert response.json()["details"] == "CurrencyMismatchError"


def test_compute_settlement_by_currency():
    expenses = TRIP + [_expense("e3", "alice", "3000", ["alice", "bob"], currency="JPY")]

    response = client.post("/api/settlement/compute-by-currency", json={"expenses": expenses})

    assert response.status_code == 200
    data = response.json()
    assert [r["currency"] for r in data] == ["JPY", "USD"]
    assert Decimal(data[0]["transfers"][0]["amount"]) == Decimal("1500")


def test_validate_settlement():
    computed = client.post("/api/settlement/validate", json={"expenses": TRIP})
    tampered = client.post(
        "/api/settlement/validate",
        json={"expenses": TRIP, "transfers": [{"from_id": "carol", "to_id": "alice", "amount": "60"}]}
    )

    assert computed.status_code == 200
    assert computed.json() == {"is_valid": True, "issues": []}
    assert tampered.json()["is_valid"] is False


def test_validate_settlement_with_rounding_residue():
    """Test that the computed plan for a 7-way equal split passes validation."""
    people = [f"p{i}" for i in range(7)]
    expenses = [_expense("e1", "p0", "100.00", people)]

    computed = client.post("/api/settlement/validate", json={"expenses": expenses})
    off_by_a_lot = client.post(
        "/api/settlement/validate",
        json={"expenses": expenses, "transfers": [{"from_id": "p1", "to_id": "p0", "amount": "85.74"}]}
    )

    assert computed.status_code == 200
    assert computed.json() == {"is_valid": True, "issues": []}
    assert off_by_a_lot.json()["is_valid"] is False


def test_transfer_breakdown():
    response = client.post(
        "/api/settlement/breakdown",
        json={"expenses": TRIP, "from_id": "carol", "to_id": "bob"}
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_amount"]) == Decimal("15")
    assert [b["expense_id"] for b in data["expense_breakdowns"]] == ["e1", "e2"]


def test_category_spending():
    response = client.post("/api/settlement/categories", json={"expenses": TRIP})

    assert response.status_code == 200
    carol = response.json()[2]
    assert carol["participant_id"] == "carol"
    assert [(c["category"], Decimal(c["amount"])) for c in carol["categories"]] == [
        ("food", Decimal("30")),
        ("other", Decimal("15")),
    ]

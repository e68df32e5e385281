"""
Tests for transaction API endpoints.

These test the HTTP layer: status codes, response format,
and error mapping. Balance logic is tested in
test_ledger_service.py.
"""

import pytest


BASE_DATE = 1_700_000_000_000


@pytest.fixture
def accounts(client):
    """Create two USD accounts and return their ids."""
    cash = client.post("/accounts", json={"name": "Cash", "balance_cents": 1000})
    bank = client.post("/accounts", json={"name": "Bank"})
    return cash.json()["id"], bank.json()["id"]


def balance(client, account_id):
    return client.get(f"/accounts/{account_id}").json()["balance_cents"]


class TestCreateTransaction:

    def test_expense_returns_201_and_moves_balance(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 300,
            "date": BASE_DATE,
        })

        assert response.status_code == 201
        data = response.json()
        assert data["transaction_type"] == "expense"
        assert data["amount_cents"] == 300
        assert balance(client, cash_id) == 700

    def test_transfer_moves_both_balances(self, client, accounts):
        cash_id, bank_id = accounts
        response = client.post("/transactions", json={
            "transaction_type": "transfer",
            "from_account_id": cash_id,
            "to_account_id": bank_id,
            "amount_cents": 400,
        })

        assert response.status_code == 201
        assert response.json()["amount_sent_cents"] == 400
        assert balance(client, cash_id) == 600
        assert balance(client, bank_id) == 400

    def test_invalid_amount_returns_400(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "income",
            "account_id": cash_id,
            "amount_cents": 0,
        })

        assert response.status_code == 400
        assert "amount_cents" in response.json()["detail"]
        assert balance(client, cash_id) == 1000

    def test_unknown_account_returns_400(self, client):
        response = client.post("/transactions", json={
            "transaction_type": "income",
            "account_id": "missing",
            "amount_cents": 10,
        })
        assert response.status_code == 400

    def test_amount_beyond_storage_range_returns_400(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 2**63,
        })

        assert response.status_code == 400
        assert "must not exceed" in response.json()["detail"]
        assert balance(client, cash_id) == 1000
        assert client.get("/transactions").json()["items"] == []

    def test_date_beyond_storage_range_returns_422(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 10,
            "date": 2**63,
        })
        assert response.status_code == 422
        assert balance(client, cash_id) == 1000

    def test_unknown_category_returns_400(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "category_id": "missing",
            "amount_cents": 10,
        })
        assert response.status_code == 400
        assert balance(client, cash_id) == 1000

    def test_unknown_type_returns_422(self, client, accounts):
        cash_id, _ = accounts
        response = client.post("/transactions", json={
            "transaction_type": "refund",
            "account_id": cash_id,
            "amount_cents": 10,
        })
        assert response.status_code == 422


class TestUpdateTransaction:

    def test_patch_amount(self, client, accounts):
        cash_id, _ = accounts
        entry_id = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 300,
        }).json()["id"]

        response = client.patch(f"/transactions/{entry_id}", json={"amount_cents": 100})

        assert response.status_code == 200
        assert response.json()["amount_cents"] == 100
        assert balance(client, cash_id) == 900

    def test_patch_missing_returns_404(self, client):
        response = client.patch("/transactions/missing", json={"amount_cents": 1})
        assert response.status_code == 404

    def test_patch_same_account_transfer_returns_400(self, client, accounts):
        cash_id, _ = accounts
        entry_id = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 300,
        }).json()["id"]

        response = client.patch(f"/transactions/{entry_id}", json={
            "transaction_type": "transfer",
            "from_account_id": cash_id,
            "to_account_id": cash_id,
        })

        assert response.status_code == 400
        assert balance(client, cash_id) == 700


class TestDeleteTransaction:

    def test_delete_restores_balance(self, client, accounts):
        cash_id, _ = accounts
        entry_id = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 300,
        }).json()["id"]

        response = client.delete(f"/transactions/{entry_id}")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert balance(client, cash_id) == 1000
        assert client.get(f"/transactions/{entry_id}").status_code == 404

    def test_delete_other_owner_returns_404(self, client, accounts):
        cash_id, _ = accounts
        entry_id = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": cash_id,
            "amount_cents": 300,
        }).json()["id"]

        response = client.delete(
            f"/transactions/{entry_id}", headers={"X-User-Id": "user-2"}
        )

        assert response.status_code == 404
        assert balance(client, cash_id) == 700


class TestListTransactions:

    def test_pages_with_cursor(self, client, accounts):
        cash_id, _ = accounts
        for offset in range(3):
            client.post("/transactions", json={
                "transaction_type": "income",
                "account_id": cash_id,
                "amount_cents": 1,
                "date": BASE_DATE + offset,
            })

        first = client.get("/transactions", params={"limit": 2}).json()
        assert [e["date"] for e in first["items"]] == [BASE_DATE + 2, BASE_DATE + 1]
        assert first["has_more"] is True

        second = client.get(
            "/transactions", params={"limit": 2, "cursor": first["next_cursor"]}
        ).json()
        assert [e["date"] for e in second["items"]] == [BASE_DATE]
        assert second["has_more"] is False
        assert second["next_cursor"] is None

    def test_filters_by_account_and_type(self, client, accounts):
        cash_id, bank_id = accounts
        client.post("/transactions", json={
            "transaction_type": "income", "account_id": bank_id, "amount_cents": 5,
        })
        client.post("/transactions", json={
            "transaction_type": "transfer",
            "from_account_id": cash_id,
            "to_account_id": bank_id,
            "amount_cents": 5,
        })

        data = client.get("/transactions", params={
            "accountId": cash_id, "transactionType": "transfer",
        }).json()

        assert len(data["items"]) == 1
        assert data["items"][0]["to_account_id"] == bank_id

    def test_ascending_sort(self, client, accounts):
        cash_id, _ = accounts
        for offset in (1, 0):
            client.post("/transactions", json={
                "transaction_type": "income",
                "account_id": cash_id,
                "amount_cents": 1,
                "date": BASE_DATE + offset,
            })

        data = client.get("/transactions", params={"sort": "asc"}).json()
        assert [e["date"] for e in data["items"]] == [BASE_DATE, BASE_DATE + 1]

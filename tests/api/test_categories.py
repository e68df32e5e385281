"""
Tests for category API endpoints.
"""

import pytest


@pytest.fixture
def food(client):
    return client.post("/categories", json={"name": "Food", "type": "expense"}).json()


class TestCreateCategory:

    def test_create_category_returns_201(self, client):
        response = client.post("/categories", json={"name": " Food ", "type": "expense"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Food"
        assert data["type"] == "expense"
        assert data["icon"] == "MoreHorizontal"
        assert data["parent_id"] is None

    def test_child_category(self, client, food):
        response = client.post("/categories", json={
            "name": "Groceries", "type": "expense", "parent_id": food["id"],
        })
        assert response.status_code == 201
        assert response.json()["parent_id"] == food["id"]

    def test_parent_of_other_owner_returns_400(self, client):
        theirs = client.post(
            "/categories",
            json={"name": "Food", "type": "expense"},
            headers={"X-User-Id": "user-2"},
        ).json()

        response = client.post("/categories", json={
            "name": "Groceries", "type": "expense", "parent_id": theirs["id"],
        })
        assert response.status_code == 400

    def test_unknown_type_returns_422(self, client):
        response = client.post("/categories", json={"name": "Food", "type": "transfer"})
        assert response.status_code == 422


class TestReadCategories:

    def test_list_is_sorted_and_scoped_by_owner(self, client):
        client.post("/categories", json={"name": "Salary", "type": "income"})
        client.post("/categories", json={"name": "Food", "type": "expense"})
        client.post(
            "/categories",
            json={"name": "Theirs", "type": "expense"},
            headers={"X-User-Id": "user-2"},
        )

        names = [c["name"] for c in client.get("/categories").json()]
        assert names == ["Food", "Salary"]

    def test_other_owner_gets_404(self, client, food):
        response = client.get(
            f"/categories/{food['id']}", headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404


class TestUpdateCategory:

    def test_patch_changes_only_given_fields(self, client, food):
        response = client.patch(f"/categories/{food['id']}", json={"name": "Eating out"})

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Eating out"
        assert data["type"] == "expense"
        assert data["icon"] == food["icon"]

    def test_null_parent_detaches(self, client, food):
        child = client.post("/categories", json={
            "name": "Groceries", "type": "expense", "parent_id": food["id"],
        }).json()

        response = client.patch(f"/categories/{child['id']}", json={"parent_id": None})

        assert response.status_code == 200
        assert response.json()["parent_id"] is None

    def test_own_parent_returns_400(self, client, food):
        response = client.patch(
            f"/categories/{food['id']}", json={"parent_id": food["id"]}
        )
        assert response.status_code == 400

    def test_patch_missing_returns_404(self, client):
        response = client.patch("/categories/missing", json={"name": "X"})
        assert response.status_code == 404


class TestDeleteCategory:

    def test_delete_keeps_entries_and_balances(self, client, food):
        account_id = client.post(
            "/accounts", json={"name": "Cash", "balance_cents": 1000}
        ).json()["id"]
        entry_id = client.post("/transactions", json={
            "transaction_type": "expense",
            "account_id": account_id,
            "category_id": food["id"],
            "amount_cents": 300,
        }).json()["id"]

        response = client.delete(f"/categories/{food['id']}")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert client.get(f"/categories/{food['id']}").status_code == 404
        entry = client.get(f"/transactions/{entry_id}").json()
        assert entry["category_id"] is None
        assert entry["amount_cents"] == 300
        balance = client.get(f"/accounts/{account_id}").json()["balance_cents"]
        assert balance == 700

    def test_delete_detaches_children(self, client, food):
        child = client.post("/categories", json={
            "name": "Groceries", "type": "expense", "parent_id": food["id"],
        }).json()

        client.delete(f"/categories/{food['id']}")

        assert client.get(f"/categories/{child['id']}").json()["parent_id"] is None

    def test_delete_other_owner_returns_404(self, client, food):
        response = client.delete(
            f"/categories/{food['id']}", headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404
        assert client.get(f"/categories/{food['id']}").status_code == 200

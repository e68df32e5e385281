"""
Tests for account API endpoints.
"""


class TestCreateAccount:

    def test_create_account_returns_201(self, client):
        response = client.post("/accounts", json={"name": "Cash"})
        assert response.status_code == 201

    def test_create_account_applies_defaults(self, client):
        data = client.post("/accounts", json={"name": "Cash"}).json()
        assert data["balance_cents"] == 0
        assert data["currency"] == "USD"
        assert data["icon"] == "Landmark"
        assert data["type"] == "Bank Account"

    def test_opening_balance_and_currency(self, client):
        data = client.post("/accounts", json={
            "name": "Euro savings",
            "currency": "eur",
            "balance_cents": 25_000,
        }).json()
        assert data["currency"] == "EUR"
        assert data["balance_cents"] == 25_000

    def test_missing_name_returns_422(self, client):
        response = client.post("/accounts", json={"currency": "USD"})
        assert response.status_code == 422


class TestGetAccount:

    def test_get_account(self, client):
        account_id = client.post("/accounts", json={"name": "Cash"}).json()["id"]
        response = client.get(f"/accounts/{account_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Cash"

    def test_other_owner_gets_404(self, client):
        account_id = client.post("/accounts", json={"name": "Cash"}).json()["id"]
        response = client.get(
            f"/accounts/{account_id}", headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404

    def test_list_is_scoped_by_owner(self, client):
        client.post("/accounts", json={"name": "Mine"})
        client.post("/accounts", json={"name": "Theirs"}, headers={"X-User-Id": "user-2"})

        names = [a["name"] for a in client.get("/accounts").json()]
        assert names == ["Mine"]

    def test_missing_owner_header_returns_401(self, client):
        response = client.get("/accounts", headers={"X-User-Id": ""})
        assert response.status_code == 401


class TestUpdateAccount:

    def test_patch_display_fields(self, client):
        account_id = client.post("/accounts", json={"name": "Cash"}).json()["id"]

        response = client.patch(f"/accounts/{account_id}", json={
            "name": " Wallet ",
            "icon": "Wallet",
            "color": "hsl(12 76% 61%)",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Wallet"
        assert data["icon"] == "Wallet"
        assert data["type"] == "Bank Account"

    def test_patch_ignores_balance_and_currency(self, client):
        account_id = client.post(
            "/accounts", json={"name": "Cash", "balance_cents": 500}
        ).json()["id"]

        response = client.patch(f"/accounts/{account_id}", json={
            "balance_cents": 99_999,
            "currency": "EUR",
        })

        assert response.status_code == 200
        assert response.json()["balance_cents"] == 500
        assert response.json()["currency"] == "USD"

    def test_patch_other_owner_returns_404(self, client):
        account_id = client.post("/accounts", json={"name": "Cash"}).json()["id"]
        response = client.patch(
            f"/accounts/{account_id}",
            json={"name": "Mine now"},
            headers={"X-User-Id": "user-2"},
        )
        assert response.status_code == 404
        assert client.get(f"/accounts/{account_id}").json()["name"] == "Cash"

    def test_delete_is_not_offered(self, client):
        account_id = client.post("/accounts", json={"name": "Cash"}).json()["id"]
        response = client.delete(f"/accounts/{account_id}")
        assert response.status_code == 405

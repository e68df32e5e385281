"""
Tests for import API endpoints.
"""


MONEFY_CSV = (
    "date;account;category;amount;currency\n"
    "05/03/2024;Cash;To 'Bank';-100;USD\n"
    "05/03/2024;Bank;From 'Cash';100;USD\n"
    "06/03/2024;Cash;Food;-12.50;USD\n"
)


def test_lists_profiles(client):
    data = client.get("/imports/profiles").json()
    ids = [profile["id"] for profile in data]
    assert ids == ["zenmoney", "monefy"]
    assert data[1]["delimiter"] == ";"
    assert "amount" in data[1]["fields"]


def test_preview_does_not_write(client):
    response = client.post("/imports/preview", json={
        "profile": "monefy",
        "rows": [
            {"date": "05/03/2024", "account": "Cash", "category": "Food",
             "amount": "-3"},
            {"date": "nope", "account": "Cash", "category": "Food",
             "amount": "-3"},
        ],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["mapping"]["account"] == "outcome_account_name"
    assert len(data["rows"]) == 1
    assert data["errors"][0]["code"] == "invalid_date"
    assert client.get("/accounts").json() == []


def test_preview_unpaired_transfer_returns_422(client):
    response = client.post("/imports/preview", json={
        "profile": "monefy",
        "rows": [
            {"date": "05/03/2024", "account": "Cash", "category": "To 'Bank'",
             "amount": "-100"},
        ],
    })

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["account"] == "Cash"
    assert detail["other_account"] == "Bank"
    assert detail["row_index"] == 0


def test_import_normalized_rows(client):
    response = client.post("/imports", json={
        "rows": [
            {"transaction_type": "income", "date": 1_709_596_800_000,
             "amount": "25.00", "account_name": "Wallet"},
        ],
    })

    assert response.status_code == 200
    assert response.json()["success_count"] == 1
    accounts = client.get("/accounts").json()
    assert accounts[0]["name"] == "Wallet"
    assert accounts[0]["balance_cents"] == 2500


def test_csv_import(client):
    response = client.post("/imports/csv", json={
        "profile": "monefy",
        "content": MONEFY_CSV,
    })

    assert response.status_code == 200
    summary = response.json()
    assert summary["success_count"] == 2
    assert sorted(summary["new_account_names"]) == ["Bank", "Cash"]

    balances = {a["name"]: a["balance_cents"] for a in client.get("/accounts").json()}
    assert balances == {"Bank": 10_000, "Cash": -11_250}


def test_csv_without_rows_returns_400(client):
    response = client.post("/imports/csv", json={
        "profile": "monefy",
        "content": "date;account;category;amount\n",
    })
    assert response.status_code == 400


def test_import_jobs_history(client):
    client.post("/imports/csv", json={"profile": "monefy", "content": MONEFY_CSV})

    jobs = client.get("/imports/jobs").json()
    assert len(jobs) == 1
    assert jobs[0]["source"] == "monefy"
    assert jobs[0]["status"] == "completed"
    assert jobs[0]["summary"]["success_count"] == 2

    job = client.get(f"/imports/jobs/{jobs[0]['id']}").json()
    assert job["id"] == jobs[0]["id"]


def test_import_job_of_other_owner_returns_404(client):
    client.post("/imports/csv", json={"profile": "monefy", "content": MONEFY_CSV})
    job_id = client.get("/imports/jobs").json()[0]["id"]

    response = client.get(f"/imports/jobs/{job_id}", headers={"X-User-Id": "user-2"})

    assert response.status_code == 404
    assert client.get("/imports/jobs", headers={"X-User-Id": "user-2"}).json() == []

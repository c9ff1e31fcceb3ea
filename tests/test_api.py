# tests/test_api.py
# HTTP-уровень: создание расходов, балансы группы, settle-up, итог пользователя.

from __future__ import annotations


def _post_expense(client, trip, **overrides):
    body = {
        "group_id": trip["group"],
        "description": "Dinner",
        "amount": 1000,
        "paid_by": trip["alice"],
        "split_type": "equal",
        "splits": [{"user_id": trip["alice"]}, {"user_id": trip["bob"]}, {"user_id": trip["carol"]}],
    }
    body.update(overrides)
    return client.post("/api/expenses/", json=body)


def _by_user(items, currency="USD"):
    return {b["user_id"]: b["amount"] for b in items if b["currency"] == currency}


# ── Splits preview ─────────────────────────────────────────────────────────

def test_preview_equal_split(client):
    resp = client.post(
        "/api/splits/preview",
        json={"amount": 1000, "split_type": "equal", "paid_by": 1, "splits": [{"user_id": 1}, {"user_id": 2}, {"user_id": 3}]},
    )
    assert resp.status_code == 200
    assert resp.json()["shares"] == [
        {"user_id": 1, "owed_share": 334},
        {"user_id": 2, "owed_share": 333},
        {"user_id": 3, "owed_share": 333},
    ]


def test_preview_exact_mismatch_is_422(client):
    resp = client.post(
        "/api/splits/preview",
        json={"amount": 10000, "split_type": "exact", "splits": [{"user_id": 1, "amount": 6000}, {"user_id": 2, "amount": 3000}]},
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Sum of amounts (9000) does not equal total (10000)"


def test_preview_percentage_mismatch_is_422(client):
    resp = client.post(
        "/api/splits/preview",
        json={"amount": 100, "split_type": "percentage", "splits": [{"user_id": 1, "percentage": 60}, {"user_id": 2, "percentage": 30}]},
    )
    assert resp.status_code == 422
    assert "got 90" in resp.json()["detail"]


# ── Expenses ───────────────────────────────────────────────────────────────

def test_create_expense_stores_exact_shares(client, trip):
    resp = _post_expense(client, trip)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["currency_code"] == "USD"
    owed = {s["user_id"]: s["owed_share"] for s in data["splits"]}
    paid = {s["user_id"]: s["paid_share"] for s in data["splits"]}
    assert owed == {trip["alice"]: 334, trip["bob"]: 333, trip["carol"]: 333}
    assert sum(paid.values()) == 1000 and paid[trip["alice"]] == 1000


def test_create_expense_payer_outside_split(client, trip):
    resp = _post_expense(
        client, trip,
        split_type="shares",
        splits=[{"user_id": trip["bob"], "shares": 2}, {"user_id": trip["carol"], "shares": 1}],
        amount=10000,
    )
    assert resp.status_code == 201, resp.text
    splits = {s["user_id"]: s for s in resp.json()["splits"]}
    assert splits[trip["alice"]]["owed_share"] == 0
    assert splits[trip["alice"]]["paid_share"] == 10000
    assert splits[trip["bob"]]["owed_share"] + splits[trip["carol"]]["owed_share"] == 10000


def test_create_expense_rejects_non_member(client, trip):
    resp = _post_expense(client, trip, splits=[{"user_id": trip["alice"]}, {"user_id": 999}])
    assert resp.status_code == 422


def test_create_expense_rejects_duplicates(client, trip):
    resp = _post_expense(client, trip, splits=[{"user_id": trip["bob"]}, {"user_id": trip["bob"]}])
    assert resp.status_code == 422
    assert "duplicate" in resp.json()["detail"]


def test_create_expense_rejects_unknown_currency(client, trip):
    resp = _post_expense(client, trip, currency_code="XYZ")
    assert resp.status_code == 422


def test_create_expense_rejects_float_amount(client, trip):
    resp = _post_expense(client, trip, amount=10.5)
    assert resp.status_code == 422


# ── Balances ───────────────────────────────────────────────────────────────

def test_group_balances_without_expenses(client, trip):
    resp = client.get(f"/api/groups/{trip['group']}/balances")
    assert resp.status_code == 200
    data = resp.json()
    assert _by_user(data["balances"]) == {trip["alice"]: 0, trip["bob"]: 0, trip["carol"]: 0}
    assert data["debts"] == [] and data["simplified_debts"] == []


def test_group_balances_and_debts(client, trip):
    _post_expense(client, trip)  # alice платит 1000 на троих
    _post_expense(
        client, trip,
        paid_by=trip["bob"], amount=600, split_type="exact",
        splits=[{"user_id": trip["carol"], "amount": 600}],
    )
    data = client.get(f"/api/groups/{trip['group']}/balances").json()

    assert _by_user(data["balances"]) == {trip["alice"]: 666, trip["bob"]: 267, trip["carol"]: -933}
    names = {b["user_id"]: b["user_name"] for b in data["balances"]}
    assert names[trip["alice"]] == "Alice"

    pairwise = {(d["from_user_id"], d["to_user_id"]): d["amount"] for d in data["debts"]}
    assert pairwise == {
        (trip["bob"], trip["alice"]): 333,
        (trip["carol"], trip["alice"]): 333,
        (trip["carol"], trip["bob"]): 600,
    }
    assert data["simplified_debts"] == [
        {"from_user_id": trip["carol"], "to_user_id": trip["alice"], "amount": 666, "currency": "USD"},
        {"from_user_id": trip["carol"], "to_user_id": trip["bob"], "amount": 267, "currency": "USD"},
    ]


def test_multi_currency_balances_are_separate(client, trip):
    _post_expense(client, trip, amount=900)
    _post_expense(
        client, trip,
        paid_by=trip["carol"], amount=3000, currency_code="jpy",
        splits=[{"user_id": trip["alice"]}, {"user_id": trip["carol"]}],
    )
    data = client.get(f"/api/groups/{trip['group']}/balances").json()
    assert _by_user(data["balances"], "USD") == {trip["alice"]: 600, trip["bob"]: -300, trip["carol"]: -300}
    assert _by_user(data["balances"], "JPY") == {trip["alice"]: -1500, trip["bob"]: 0, trip["carol"]: 1500}
    jpy = [d for d in data["simplified_debts"] if d["currency"] == "JPY"]
    assert jpy == [{"from_user_id": trip["alice"], "to_user_id": trip["carol"], "amount": 1500, "currency": "JPY"}]


def test_deleted_expense_leaves_balances(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]
    assert client.delete(f"/api/expenses/{expense_id}").status_code == 204
    data = client.get(f"/api/groups/{trip['group']}/balances").json()
    assert all(b["amount"] == 0 for b in data["balances"])
    assert client.get(f"/api/expenses/{expense_id}").status_code == 404


# ── Settle-up ──────────────────────────────────────────────────────────────

def test_settle_up_clears_debt(client, trip):
    _post_expense(
        client, trip,
        amount=500, split_type="exact", splits=[{"user_id": trip["bob"], "amount": 500}],
    )
    resp = client.post(
        f"/api/groups/{trip['group']}/settle",
        json={"from_user_id": trip["bob"], "to_user_id": trip["alice"], "amount": 500},
    )
    assert resp.status_code == 201, resp.text
    payment = resp.json()
    assert payment["is_payment"] is True
    assert {s["user_id"]: s["owed_share"] for s in payment["splits"]} == {trip["bob"]: 0, trip["alice"]: 500}

    data = client.get(f"/api/groups/{trip['group']}/balances").json()
    assert all(b["amount"] == 0 for b in data["balances"])
    assert data["debts"] == [] and data["simplified_debts"] == []


def test_settle_up_with_self_is_rejected(client, trip):
    resp = client.post(
        f"/api/groups/{trip['group']}/settle",
        json={"from_user_id": trip["bob"], "to_user_id": trip["bob"], "amount": 500},
    )
    assert resp.status_code == 422


# ── Group lifecycle ────────────────────────────────────────────────────────

def test_group_with_debts_cannot_be_deleted(client, trip):
    _post_expense(client, trip)
    assert client.delete(f"/api/groups/{trip['group']}").status_code == 409


def test_member_with_balance_cannot_be_removed(client, trip):
    _post_expense(client, trip)
    assert client.delete(f"/api/groups/{trip['group']}/members/{trip['bob']}").status_code == 409


def test_create_group_adds_owner_as_member(client):
    user = client.post("/api/users/", json={"name": "Dana"}).json()
    resp = client.post("/api/groups/", json={"name": "Flat", "owner_id": user["id"], "default_currency_code": "eur"})
    assert resp.status_code == 201, resp.text
    group = resp.json()
    assert group["default_currency_code"] == "EUR"
    assert [m["user"]["id"] for m in group["members"]] == [user["id"]]


# ── Overall balances ───────────────────────────────────────────────────────

def test_overall_balances_across_groups(client, trip):
    _post_expense(client, trip, amount=900)

    other = client.post("/api/groups/", json={"name": "Other", "owner_id": trip["bob"], "default_currency_code": "EUR"}).json()
    client.post(f"/api/groups/{other['id']}/members", json={"user_id": trip["alice"]})
    _post_expense(
        client, trip,
        group_id=other["id"], paid_by=trip["bob"], amount=400, currency_code="EUR",
        splits=[{"user_id": trip["alice"]}, {"user_id": trip["bob"]}],
    )

    resp = client.get(f"/api/users/{trip['alice']}/balances")
    assert resp.status_code == 200
    assert resp.json() == {"balances": [{"currency": "USD", "amount": 600}, {"currency": "EUR", "amount": -200}]}

    bob = client.get(f"/api/users/{trip['bob']}/balances").json()
    assert bob == {"balances": [{"currency": "USD", "amount": -300}, {"currency": "EUR", "amount": 200}]}


def test_currencies_catalogue(client):
    resp = client.get("/api/currencies")
    assert resp.status_code == 200
    codes = {c["code"]: c["scale"] for c in resp.json()}
    assert codes["USD"] == 100 and codes["JPY"] == 1 and codes["KWD"] == 1000
    assert client.get("/api/currencies/xyz").status_code == 404


# ── Expense edits ──────────────────────────────────────────────────────────

def test_update_expense_replaces_splits_and_balances_follow(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]

    resp = client.patch(
        f"/api/expenses/{expense_id}",
        json={"amount": 600, "split_type": "exact", "splits": [{"user_id": trip["bob"], "amount": 600}]},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["amount"] == 600 and data["split_type"] == "exact"
    rows = {s["user_id"]: (s["owed_share"], s["paid_share"]) for s in data["splits"]}
    assert rows == {trip["bob"]: (600, 0), trip["alice"]: (0, 600)}

    balances = client.get(f"/api/groups/{trip['group']}/balances").json()["balances"]
    assert _by_user(balances) == {trip["alice"]: 600, trip["bob"]: -600, trip["carol"]: 0}


def test_update_expense_amount_without_splits_is_rejected(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]
    resp = client.patch(f"/api/expenses/{expense_id}", json={"amount": 1200})
    assert resp.status_code == 422
    assert "Cannot change amount" in resp.json()["detail"]

    balances = client.get(f"/api/groups/{trip['group']}/balances").json()["balances"]
    assert _by_user(balances) == {trip["alice"]: 666, trip["bob"]: -333, trip["carol"]: -333}


def test_update_expense_payer_moves_paid_share(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]
    resp = client.patch(f"/api/expenses/{expense_id}", json={"paid_by": trip["bob"]})
    assert resp.status_code == 200, resp.text
    paid = {s["user_id"]: s["paid_share"] for s in resp.json()["splits"]}
    assert paid == {trip["alice"]: 0, trip["bob"]: 1000, trip["carol"]: 0}

    balances = client.get(f"/api/groups/{trip['group']}/balances").json()["balances"]
    assert _by_user(balances) == {trip["alice"]: -334, trip["bob"]: 667, trip["carol"]: -333}


def test_update_expense_description_keeps_shares(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]
    resp = client.patch(f"/api/expenses/{expense_id}", json={"description": "Late dinner"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["description"] == "Late dinner"
    assert {s["user_id"]: s["owed_share"] for s in data["splits"]} == {
        trip["alice"]: 334, trip["bob"]: 333, trip["carol"]: 333,
    }


def test_update_expense_rejects_non_member_split(client, trip):
    expense_id = _post_expense(client, trip).json()["id"]
    resp = client.patch(
        f"/api/expenses/{expense_id}",
        json={"splits": [{"user_id": trip["alice"]}, {"user_id": 999}]},
    )
    assert resp.status_code == 422
    owed = {s["user_id"]: s["owed_share"] for s in client.get(f"/api/expenses/{expense_id}").json()["splits"]}
    assert owed == {trip["alice"]: 334, trip["bob"]: 333, trip["carol"]: 333}


def test_payment_cannot_be_edited(client, trip):
    payment = client.post(
        f"/api/groups/{trip['group']}/settle",
        json={"from_user_id": trip["bob"], "to_user_id": trip["alice"], "amount": 500},
    ).json()
    resp = client.patch(f"/api/expenses/{payment['id']}", json={"description": "Refund"})
    assert resp.status_code == 422


def test_expenses_of_deleted_group_are_hidden(client, trip):
    # alice платит сама за себя, долгов нет, группу можно удалить
    expense_id = _post_expense(
        client, trip, split_type="exact", splits=[{"user_id": trip["alice"], "amount": 1000}],
    ).json()["id"]
    assert client.delete(f"/api/groups/{trip['group']}").status_code == 204

    assert client.get(f"/api/expenses/{expense_id}").status_code == 404
    assert client.patch(f"/api/expenses/{expense_id}", json={"description": "x"}).status_code == 404
    assert client.delete(f"/api/expenses/{expense_id}").status_code == 404


# ── Group listing and edits ────────────────────────────────────────────────

def test_list_user_groups(client, trip):
    other = client.post("/api/groups/", json={"name": "Other", "owner_id": trip["bob"]}).json()

    alice_groups = client.get("/api/groups/", params={"user_id": trip["alice"]}).json()
    assert [g["id"] for g in alice_groups] == [trip["group"]]

    bob_groups = client.get("/api/groups/", params={"user_id": trip["bob"]}).json()
    assert [g["id"] for g in bob_groups] == [other["id"], trip["group"]]

    assert client.get("/api/groups/", params={"user_id": 999}).status_code == 404


def test_update_group(client, trip):
    resp = client.patch(
        f"/api/groups/{trip['group']}",
        json={"name": "Road trip", "description": "Summer", "default_currency_code": "eur"},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert (data["name"], data["description"], data["default_currency_code"]) == ("Road trip", "Summer", "EUR")

    resp = client.patch(f"/api/groups/{trip['group']}", json={"default_currency_code": "XYZ"})
    assert resp.status_code == 422

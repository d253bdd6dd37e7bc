def test_app_data_is_empty_before_first_upload(client, make_user, token_for):
    user = make_user("worker@example.com")

    resp = client.get("/app-data", headers={"Authorization": f"Bearer {token_for(user)}"})

    assert resp.status_code == 200
    assert resp.json() == {"data": None, "updatedAt": None}


def test_app_data_round_trip(client, make_user, token_for):
    user = make_user("worker@example.com")
    headers = {"Authorization": f"Bearer {token_for(user)}"}
    snapshot = {"projects": '[{"id": 1, "name": "Roof"}]', "theme": "dark"}

    put = client.put("/app-data", json={"data": snapshot}, headers=headers)
    assert put.status_code == 200
    assert put.json()["data"] == snapshot
    assert put.json()["updatedAt"]

    got = client.get("/app-data", headers=headers).json()
    assert got["data"] == snapshot
    assert got["updatedAt"] is not None


def test_app_data_upload_replaces_previous_snapshot(client, make_user, token_for):
    user = make_user("worker@example.com")
    headers = {"Authorization": f"Bearer {token_for(user)}"}

    client.put("/app-data", json={"data": {"a": "1", "b": "2"}}, headers=headers)
    client.put("/app-data", json={"data": {"c": "3"}}, headers=headers)

    assert client.get("/app-data", headers=headers).json()["data"] == {"c": "3"}


def test_app_data_is_per_user(client, make_user, token_for):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")

    client.put("/app-data", json={"data": {"k": "alice"}}, headers={"Authorization": f"Bearer {token_for(alice)}"})

    resp = client.get("/app-data", headers={"Authorization": f"Bearer {token_for(bob)}"})
    assert resp.json()["data"] is None


def test_app_data_requires_token(client):
    assert client.get("/app-data").status_code == 401
    assert client.put("/app-data", json={"data": {}}).status_code == 401


def test_app_data_rejects_non_string_values(client, make_user, token_for):
    user = make_user("worker@example.com")
    resp = client.put(
        "/app-data",
        json={"data": {"k": {"nested": True}}},
        headers={"Authorization": f"Bearer {token_for(user)}"},
    )
    assert resp.status_code == 400


def test_app_data_removed_with_user(app, client, admin_headers, make_user, token_for):
    from models.app_data import AppData

    user = make_user("leaver@example.com")
    client.put("/app-data", json={"data": {"k": "v"}}, headers={"Authorization": f"Bearer {token_for(user)}"})

    client.delete(f"/users/{user.id}", headers=admin_headers)

    db = app.state.session_factory()
    try:
        assert db.query(AppData).count() == 0
    finally:
        db.close()

from models.log import AuthLog
from models.users import User


def _all_logs(app):
    db = app.state.session_factory()
    try:
        return [(l.action, l.status, l.user_id, l.meta) for l in db.query(AuthLog).order_by(AuthLog.id).all()]
    finally:
        db.close()


def test_login_attempts_are_audited_without_passwords(app, client, make_user):
    user = make_user("worker@example.com", password="pw-secret")

    client.post("/auth/login", json={"email": "worker@example.com", "password": "wrong-secret"})
    client.post("/auth/login", json={"email": "worker@example.com", "password": "pw-secret"})

    logs = _all_logs(app)
    assert [(a, s, u) for a, s, u, _ in logs] == [("LOGIN", "FAIL", user.id), ("LOGIN", "SUCCESS", user.id)]
    dumped = repr(logs)
    assert "pw-secret" not in dumped
    assert "wrong-secret" not in dumped


def test_registration_is_audited_against_acting_admin(app, client, admin, admin_headers):
    client.post("/auth/register", json={"email": "new@example.com", "password": "pw"}, headers=admin_headers)

    action, status, user_id, meta = _all_logs(app)[-1]
    assert (action, status, user_id) == ("REGISTER", "SUCCESS", admin.id)
    assert meta["email"] == "new@example.com"


def test_logs_endpoint_lists_newest_first(client, admin_headers, make_user):
    make_user("worker@example.com", password="pw")
    client.post("/auth/login", json={"email": "worker@example.com", "password": "bad"})
    client.post("/auth/google", json={"email": "worker@example.com"})

    resp = client.get("/logs", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert [i["action"] for i in body["items"]] == ["GOOGLE_LOGIN", "LOGIN"]
    assert all(i["ts"] for i in body["items"])

    resp = client.get("/logs", params={"status": "fail"}, headers=admin_headers)
    assert [i["action"] for i in resp.json()["items"]] == ["LOGIN"]


def test_logs_endpoint_requires_admin(client):
    assert client.get("/logs").status_code == 403


def _remove_user(app, user_id):
    db = app.state.session_factory()
    try:
        db.query(User).filter(User.id == user_id).delete()
        db.commit()
    finally:
        db.close()


def test_sqlite_connections_enforce_foreign_keys(app):
    with app.state.engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


def test_deleting_user_keeps_their_audit_rows(app, client, admin_headers, make_user):
    user = make_user("leaver@example.com", password="pw")
    client.post("/auth/login", json={"email": "leaver@example.com", "password": "pw"})

    assert client.delete(f"/users/{user.id}", headers=admin_headers).status_code == 200

    login_rows = [row for row in _all_logs(app) if row[0] == "LOGIN"]
    assert [(a, s, u) for a, s, u, _ in login_rows] == [("LOGIN", "SUCCESS", None)]


def test_register_with_token_of_deleted_admin(app, client, admin, admin_headers, fetch_user):
    _remove_user(app, admin.id)

    resp = client.post("/auth/register", json={"email": "new@example.com", "password": "pw"}, headers=admin_headers)

    assert resp.status_code == 200
    assert fetch_user("new@example.com") is not None
    action, status, user_id, meta = _all_logs(app)[-1]
    assert (action, status, user_id) == ("REGISTER", "SUCCESS", None)
    assert meta["stale_user_id"] == admin.id


def test_update_and_delete_with_token_of_deleted_admin(app, client, admin, admin_headers, make_user, fetch_user):
    user = make_user("worker@example.com")
    _remove_user(app, admin.id)

    resp = client.patch(f"/users/{user.id}", json={"name": "Renamed"}, headers=admin_headers)
    assert resp.status_code == 200

    resp = client.delete(f"/users/{user.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert fetch_user("worker@example.com") is None

    assert [(a, u) for a, _, u, _ in _all_logs(app)] == [("USER_UPDATE", None), ("USER_DELETE", None)]

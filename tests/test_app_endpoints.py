import asyncio
from dataclasses import replace
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from zenbatu.app import create_app
from zenbatu.auth.session import InMemorySessionStore
from zenbatu.config import load_settings

GENERIC_LOGIN_ERROR = "Invalid username or password."


def _signup_and_login(client, username="alice", password="Secr3t!"):
    r = client.post("/create_user", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    return body["data"]["sessionId"]


def test_connection_state(client):
    r = client.get("/connection_state")
    assert r.status_code == 200
    assert r.json() == {"success": True, "data": "connected"}


def test_sign_up_then_login_sets_cookie_and_returns_dashboard(client, settings):
    r = client.post("/sign_up", json={"username": "alice", "password": "Secr3t!"})
    assert r.status_code == 204
    assert r.content == b""

    r = client.post("/login", json={"username": "alice", "password": "Secr3t!"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["sessionId"]
    assert data["assets"] == [] and data["categories"] == [] and data["sites"] == []
    assert settings.cookie_name in r.cookies
    # the cookie carries a signed token, not the bare session id
    assert r.cookies[settings.cookie_name] != data["sessionId"]


def test_session_check_and_idempotent_logout(client):
    sid = _signup_and_login(client)
    assert client.post("/logged_in", json={"sessionId": sid}).json()["data"] is True
    assert client.post("/logged_in", json={}).json()["data"] is True  # via cookie

    assert client.post("/log_out", json={"sessionId": sid}).status_code == 204
    assert client.post("/log_out", json={"sessionId": sid}).status_code == 204
    assert client.post("/log_out").status_code == 204

    assert client.post("/logged_in", json={"sessionId": sid}).json()["data"] is False
    r = client.post("/get_asset", json={"sessionId": sid, "name": "anything"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "err": "Session Id does not exist!"}


def test_logout_via_cookie_clears_it(client, settings):
    _signup_and_login(client)
    assert client.get("/dashboard").status_code == 200
    assert client.post("/log_out").status_code == 204
    assert client.get("/dashboard").status_code == 401


def test_unknown_user_and_wrong_password_look_identical(client):
    client.post("/sign_up", json={"username": "alice", "password": "Secr3t!"})
    unknown = client.post("/login", json={"username": "ghost", "password": "whatever"})
    wrong = client.post("/login", json={"username": "alice", "password": "Wrong1!"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"success": False, "err": GENERIC_LOGIN_ERROR}


def test_validation_errors_are_400(client):
    r = client.post("/sign_up", json={"username": "bob", "password": "ab"})
    assert r.status_code == 400
    assert "special character" in r.json()["err"]

    r = client.post("/login", json={"username": "x", "password": "Secr3t!"})
    assert r.status_code == 400
    assert "between 3 and 50" in r.json()["err"]

    # nothing was stored for bob
    r = client.post("/login", json={"username": "bob", "password": "ab!"})
    assert r.json()["err"] == GENERIC_LOGIN_ERROR


def test_duplicate_sign_up_is_409(client):
    assert client.post("/sign_up", json={"username": "alice", "password": "Secr3t!"}).status_code == 204
    r = client.post("/sign_up", json={"username": "alice", "password": "Other1!"})
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_inventory_round_trip_scoped_to_the_session(app):
    alice = TestClient(app)
    bob = TestClient(app)
    a_sid = _signup_and_login(alice, "alice", "Secr3t!")
    b_sid = _signup_and_login(bob, "bob", "Hunter2#")

    cat = alice.post("/add_category", json={"sessionId": a_sid, "category_name": "Laptops"}).json()["data"]
    site = alice.post("/add_site", json={"sessionId": a_sid, "site_name": "HQ", "location_name": "Floor 1"}).json()["data"]
    site = alice.post(
        "/add_location", json={"sessionId": a_sid, "site_id": site["site_id"], "location_name": "Floor 2"}
    ).json()["data"]
    assert [loc["location_name"] for loc in site["locations"]] == ["Floor 1", "Floor 2"]

    r = alice.post(
        "/add_asset",
        json={
            "sessionId": a_sid,
            "username": "bob",
            "asset_name": "ThinkPad",
            "category_id": cat["category_id"],
            "site_id": site["site_id"],
            "location_id": site["locations"][0]["location_id"],
            "cost": 1200,
            "useful_life": 4,
            "maintenance_schedule": "annually",
        },
    )
    assert r.status_code == 200, r.text
    asset = r.json()["data"]
    assert asset["category_name"] == "Laptops"

    r = alice.post("/get_asset", json={"sessionId": a_sid, "id": asset["asset_id"]})
    assert r.json()["data"]["asset_name"] == "ThinkPad"

    # bob cannot read it, even with the id, and his dashboard is empty
    r = bob.post("/get_asset", json={"sessionId": b_sid, "id": asset["asset_id"]})
    assert r.status_code == 404
    assert bob.get("/dashboard").json()["data"] == {"assets": [], "categories": [], "sites": []}

    dash = alice.get("/dashboard").json()["data"]
    assert [a["asset_name"] for a in dash["assets"]] == ["ThinkPad"]
    assert [c["category_name"] for c in dash["categories"]] == ["Laptops"]


def test_body_session_id_wins_over_cookie(app):
    alice = TestClient(app)
    _signup_and_login(alice, "alice", "Secr3t!")
    r = alice.post("/add_category", json={"sessionId": "forged", "category_name": "X"})
    assert r.status_code == 401


def test_tampered_cookie_is_not_a_session(app, settings):
    _signup_and_login(TestClient(app))
    stranger = TestClient(app)
    headers = {"Cookie": f"{settings.cookie_name}=not-a-signed-token"}
    assert stranger.post("/logged_in", json={}, headers=headers).json()["data"] is False
    assert stranger.get("/dashboard", headers=headers).status_code == 401


def test_cookie_signed_with_another_secret_is_rejected(app, settings, tmp_path):
    alice = TestClient(app)
    _signup_and_login(alice)
    token = alice.cookies.get(settings.cookie_name)
    assert token

    other = create_app(replace(settings, secret_key="another-secret", db_path=tmp_path / "other.db"))
    headers = {"Cookie": f"{settings.cookie_name}={token}"}
    assert TestClient(other).post("/logged_in", json={}, headers=headers).json()["data"] is False
    assert TestClient(app).post("/logged_in", json={}, headers=headers).json()["data"] is True


def test_missing_secret_key_fails_fast(settings):
    with pytest.raises(RuntimeError):
        create_app(replace(settings, secret_key=None))


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ZENBATU_DB_PATH", str(tmp_path / "z.db"))
    monkeypatch.setenv("ZENBATU_SECRET_KEY", "s3")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.setenv("ZENBATU_SESSION_MAX_AGE", "600")
    monkeypatch.setenv("ZENBATU_COOKIE_SECURE", "yes")
    s = load_settings()
    assert s.db_path == (tmp_path / "z.db").resolve()
    assert s.secret_key == "s3"
    assert s.session_max_age == 600
    assert s.cookie_secure is True
    assert s.port == 8089
    assert s.log_file is None


def test_idle_timeout_slides_with_activity(settings, monkeypatch):
    now = [1_000_000.0]
    monkeypatch.setattr("itsdangerous.timed.time", SimpleNamespace(time=lambda: now[0]))
    app = create_app(
        replace(settings, session_max_age=600),
        sessions=InMemorySessionStore(max_age=600, clock=lambda: now[0]),
    )
    client = TestClient(app)
    _signup_and_login(client)

    now[0] += 400
    r = client.get("/dashboard")
    assert r.status_code == 200
    assert "max-age=600" in r.headers["set-cookie"].lower()

    # 800s after login, but only 400s idle
    now[0] += 400
    assert client.get("/dashboard").status_code == 200

    now[0] += 601
    assert client.get("/dashboard").status_code == 401


def test_logout_with_another_session_id_keeps_the_cookie_session(app):
    alice = TestClient(app)
    _signup_and_login(alice, "alice", "Secr3t!")
    other_sid = asyncio.run(app.state.accounts.log_in("alice", "Secr3t!"))

    r = alice.post("/log_out", json={"sessionId": other_sid})
    assert r.status_code == 204
    assert "set-cookie" not in r.headers
    assert app.state.accounts.is_session_active(other_sid) is False
    assert alice.get("/dashboard").status_code == 200

    r = alice.post("/log_out")
    assert r.status_code == 204
    assert "set-cookie" in r.headers
    assert alice.get("/dashboard").status_code == 401

"""Admin endpoints: auth gate, listing, review, reply, delete, login."""
import pytest
from sqlalchemy.exc import OperationalError

from tests.conftest import ADMIN_KEY, ADMIN_PASSWORD, ADMIN_USERNAME

API = "/api"


def submit(client, name="Ann", message="hi", **extra):
    response = client.post(f"{API}/messages", json={"name": name, "message": message, **extra})
    assert response.status_code == 201
    return response.json()["data"]


def admin_list(client, headers, **params):
    response = client.get(f"{API}/admin/messages", params=params, headers=headers)
    assert response.status_code == 200
    return response.json()


BAD_HEADERS = [
    {},
    {"Authorization": "Bearer wrong"},
    {"Authorization": f"Bearer {ADMIN_KEY[:-1]}"},
    {"Authorization": f"Basic {ADMIN_KEY}"},
    {"Authorization": ADMIN_KEY},
]


@pytest.mark.parametrize("headers", BAD_HEADERS)
def test_admin_routes_require_token_and_do_not_mutate(client, headers):
    message = submit(client)
    calls = [
        ("GET", f"{API}/admin/messages", None),
        ("POST", f"{API}/admin/review", {"id": message["id"], "action": "approve"}),
        ("POST", f"{API}/admin/reply", {"parent_id": message["id"], "message": "hey"}),
        ("DELETE", f"{API}/admin/messages/{message['id']}", None),
    ]
    for method, url, body in calls:
        response = client.request(method, url, json=body, headers=headers)
        assert response.status_code == 401, url
        assert response.json()["error"]["code"] == "unauthorized"

    record = client.store.get(message["id"])
    assert record is not None
    assert record.status == "pending"
    assert client.store.list_replies([message["id"]]) == []


def test_admin_unconfigured_secret_rejects_all(make_client):
    client = make_client(ADMIN_API_KEY=None)
    response = client.get(f"{API}/admin/messages", headers={"Authorization": "Bearer "})
    assert response.status_code == 401


def test_admin_list_shows_every_status(client, admin_headers):
    pending = submit(client, "p", email="p@example.com")
    approved = submit(client, "a")
    rejected = submit(client, "r")
    client.post(f"{API}/admin/review", json={"id": approved["id"], "action": "approve"}, headers=admin_headers)
    client.post(f"{API}/admin/review", json={"id": rejected["id"], "action": "reject"}, headers=admin_headers)

    body = admin_list(client, admin_headers)
    by_id = {t["id"]: t for t in body["data"]}
    assert set(by_id) == {pending["id"], approved["id"], rejected["id"]}
    assert by_id[pending["id"]]["email"] == "p@example.com"
    assert "ip" in by_id[pending["id"]]

    only_pending = admin_list(client, admin_headers, status="pending")
    assert [t["id"] for t in only_pending["data"]] == [pending["id"]]
    assert only_pending["pagination"]["total"] == 1


def test_admin_list_invalid_status(client, admin_headers):
    response = client.get(f"{API}/admin/messages", params={"status": "spam"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_status"


def test_review_approve_and_reject(client, admin_headers):
    message = submit(client)
    response = client.post(f"{API}/admin/review", json={"id": message["id"], "action": "approve"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "id": message["id"], "status": "approved"}

    # re-review is allowed
    response = client.post(f"{API}/admin/review", json={"id": message["id"], "action": "reject"}, headers=admin_headers)
    assert response.json()["status"] == "rejected"
    assert client.get(f"{API}/messages").json()["data"] == []


def test_review_missing_message(client, admin_headers):
    response = client.post(f"{API}/admin/review", json={"id": 999999, "action": "approve"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "message_not_found"


@pytest.mark.parametrize("action", ["pending", "publish", ""])
def test_review_invalid_action(client, admin_headers, action):
    message = submit(client)
    response = client.post(f"{API}/admin/review", json={"id": message["id"], "action": action}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_status"
    assert client.store.get(message["id"]).status == "pending"


def test_admin_reply_is_approved_even_when_pending_policy(client, admin_headers):
    parent = submit(client, language="en")
    client.post(f"{API}/admin/review", json={"id": parent["id"], "action": "approve"}, headers=admin_headers)

    response = client.post(f"{API}/admin/reply", json={"parent_id": parent["id"], "message": "Thanks!"}, headers=admin_headers)
    assert response.status_code == 201
    reply = response.json()["data"]
    assert reply["is_admin_reply"] is True
    assert reply["status"] == "approved"
    assert reply["parent_id"] == parent["id"]
    assert reply["name"] == "Admin"
    assert reply["language"] == "en"

    thread = client.get(f"{API}/messages").json()["data"][0]
    assert thread["reply_count"] == 1
    assert thread["replies"][0]["id"] == reply["id"]


def test_admin_reply_to_missing_parent(client, admin_headers):
    response = client.post(f"{API}/admin/reply", json={"parent_id": 999999, "message": "hello"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "parent_not_found"


def test_admin_reply_empty_body(client, admin_headers):
    parent = submit(client)
    response = client.post(f"{API}/admin/reply", json={"parent_id": parent["id"], "message": "   "}, headers=admin_headers)
    assert response.status_code == 400


def test_admin_reply_to_reply_rejected(client, admin_headers):
    parent = submit(client)
    reply = client.post(
        f"{API}/admin/reply", json={"parent_id": parent["id"], "message": "first"}, headers=admin_headers
    ).json()["data"]
    response = client.post(f"{API}/admin/reply", json={"parent_id": reply["id"], "message": "nested"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "parent_not_root"


def test_delete_cascades_to_replies(client, admin_headers):
    root = submit(client)
    other = submit(client, "other")
    reply_ids = [
        client.post(f"{API}/admin/reply", json={"parent_id": root["id"], "message": m}, headers=admin_headers).json()["data"]["id"]
        for m in ("a", "b")
    ]

    response = client.delete(f"{API}/admin/messages/{root['id']}", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert sorted(body["deleted_ids"]) == sorted([root["id"]] + reply_ids)

    listed = admin_list(client, admin_headers)["data"]
    listed_ids = {t["id"] for t in listed} | {r["id"] for t in listed for r in t["replies"]}
    assert listed_ids == {other["id"]}


@pytest.mark.parametrize("bad_id", ["abc", "1.5", "-3", "0"])
def test_delete_malformed_id(client, admin_headers, bad_id):
    response = client.delete(f"{API}/admin/messages/{bad_id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_id"


def test_login_returns_token_usable_for_admin(client):
    response = client.post(f"{API}/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body == {"token": ADMIN_KEY, "username": ADMIN_USERNAME}

    listed = client.get(f"{API}/admin/messages", headers={"Authorization": f"Bearer {body['token']}"})
    assert listed.status_code == 200


def test_login_wrong_password(client):
    response = client.post(f"{API}/admin/login", json={"username": ADMIN_USERNAME, "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "invalid_credentials"


def test_login_missing_fields(client):
    response = client.post(f"{API}/admin/login", json={"username": ADMIN_USERNAME})
    assert response.status_code == 400


def test_login_unconfigured(make_client):
    client = make_client(ADMIN_USERNAME=None, ADMIN_PASSWORD=None)
    response = client.post(f"{API}/admin/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "admin_not_configured"


class _RootDeleteFails:
    """Session whose second DELETE fails, after the replies are gone."""

    def __init__(self, session):
        self._session = session
        self.deletes = 0

    def execute(self, statement, *args, **kwargs):
        if getattr(statement, "is_delete", False):
            self.deletes += 1
            if self.deletes == 2:
                raise OperationalError("DELETE FROM messages", {}, Exception("disk I/O error"))
        return self._session.execute(statement, *args, **kwargs)

    def __getattr__(self, name):
        return getattr(self._session, name)


def test_interrupted_cascade_leaves_renderable_root(client, admin_headers, monkeypatch):
    root = submit(client)
    client.post(f"{API}/admin/review", json={"id": root["id"], "action": "approve"}, headers=admin_headers)
    for text in ("a", "b"):
        client.post(f"{API}/admin/reply", json={"parent_id": root["id"], "message": text}, headers=admin_headers)

    session_factory = client.store.session_factory
    monkeypatch.setattr(client.store, "session_factory", lambda: _RootDeleteFails(session_factory()))
    response = client.delete(f"{API}/admin/messages/{root['id']}", headers=admin_headers)
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "store_error"
    assert "disk I/O" not in response.text

    monkeypatch.setattr(client.store, "session_factory", session_factory)
    threads = client.get(f"{API}/messages").json()["data"]
    assert [t["id"] for t in threads] == [root["id"]]
    assert threads[0]["replies"] == []
    assert threads[0]["reply_count"] == 0

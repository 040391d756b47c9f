from conftest import PASSWORD, auth_header, register_user

from nextai.models import Contact, Plan, User


def test_profile(client):
    token = register_user(client)
    res = client.get("/api/user/profile", headers=auth_header(token))
    assert res.status_code == 200
    user = res.get_json()["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["plan"]["name"] == "free"
    assert user["_count"] == {"chatSessions": 0}


def test_cookie_alone_authenticates(client):
    register_user(client)
    # the test client keeps the cookie set by signin
    res = client.get("/api/user/profile")
    assert res.status_code == 200


def test_banned_user_is_rejected(client, db_session):
    token = register_user(client)
    user = db_session.query(User).filter(User.email == "alice@example.com").one()
    user.is_ban = True
    db_session.commit()

    res = client.get("/api/user/profile", headers=auth_header(token))
    assert res.status_code == 403
    assert res.get_json()["error"] == "User is banned"


def test_update_profile(client):
    token = register_user(client)
    register_user(client, "bob@example.com", "bobby")

    res = client.put("/api/user/update-profile", headers=auth_header(token),
                     json={"username": "bobby", "email": "alice@example.com"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Username already taken"

    res = client.put("/api/user/update-profile", headers=auth_header(token),
                     json={"username": "alice", "email": "bob@example.com"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Email already in use"

    res = client.put("/api/user/update-profile", headers=auth_header(token),
                     json={"username": "alice_new", "email": "Alice.New@Example.com"})
    assert res.status_code == 200
    user = res.get_json()["data"]["user"]
    assert user["username"] == "alice_new"
    assert user["email"] == "alice.new@example.com"


def test_change_password(client):
    token = register_user(client)
    res = client.put("/api/user/change-password", headers=auth_header(token),
                     json={"currentPassword": "wrongpass1", "newPassword": "newpassword1"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Current password is incorrect"

    res = client.put("/api/user/change-password", headers=auth_header(token),
                     json={"currentPassword": PASSWORD, "newPassword": PASSWORD})
    assert res.status_code == 400

    res = client.put("/api/user/change-password", headers=auth_header(token),
                     json={"currentPassword": PASSWORD, "newPassword": "newpassword1"})
    assert res.status_code == 200

    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": "newpassword1"})
    assert res.status_code == 200


def test_update_plan(client, db_session):
    token = register_user(client)
    premium = db_session.query(Plan).filter(Plan.name == "premium").one()

    res = client.post("/api/user/update-plan", json={"planId": "nope"},
                      headers=auth_header(token))
    assert res.status_code == 404

    res = client.post("/api/user/update-plan", json={"planId": premium.id},
                      headers=auth_header(token))
    assert res.status_code == 200
    user = res.get_json()["data"]["user"]
    assert user["plan"]["name"] == "premium"
    assert user["remainingTries"] == 999999


def test_usage_stats(client, monkeypatch):
    from nextai.services import llm_service

    monkeypatch.setattr(llm_service, "generate_text", lambda prompt: "ok")
    token = register_user(client)
    res = client.post("/api/chat/sessions", json={}, headers=auth_header(token))
    session_id = res.get_json()["session"]["id"]
    client.post("/api/chat/generate", headers=auth_header(token),
                json={"sessionId": session_id, "message": "hi"})

    res = client.get("/api/user/usage-stats", headers=auth_header(token))
    assert res.status_code == 200
    stats = res.get_json()["data"]
    assert stats["totalChatSessions"] == 1
    assert stats["totalMessages"] == 2
    assert stats["todayMessages"] == 2
    assert stats["remainingTries"] == 49
    assert len(stats["chartData"]) == 7
    assert stats["chartData"][-1]["messages"] == 2


def test_delete_account_cascades(client, db_session):
    token = register_user(client)
    client.post("/api/chat/sessions", json={}, headers=auth_header(token))
    client.post("/api/contact", headers=auth_header(token), json={
        "username": "alice", "email": "alice@example.com", "message": "hello",
    })

    res = client.delete("/api/user/delete-account", headers=auth_header(token))
    assert res.status_code == 200

    assert db_session.query(User).count() == 0
    contact = db_session.query(Contact).one()
    assert contact.user_id is None

    res = client.get("/api/user/profile", headers=auth_header(token))
    assert res.status_code == 401


def test_profile_and_password_reject_wrongly_typed_fields(client):
    token = register_user(client)
    res = client.put("/api/user/update-profile", headers=auth_header(token),
                     json={"username": 12345, "email": 67890})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Username and email are required"

    res = client.put("/api/user/change-password", headers=auth_header(token),
                     json={"currentPassword": 12345678, "newPassword": 87654321})
    assert res.status_code == 400

    res = client.post("/api/user/update-plan", headers=auth_header(token), json={"planId": 1})
    assert res.status_code == 400

    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": PASSWORD})
    assert res.status_code == 200

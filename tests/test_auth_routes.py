from conftest import PASSWORD, auth_header, register_user, signup

from nextai.models import User, VerificationCode


def _other_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


def test_signup_creates_unverified_user_with_code(client, db_session):
    res = signup(client)
    assert res.status_code == 201
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["user"]["isVerified"] is False
    assert "password" not in body["data"]["user"]

    users = db_session.query(User).filter(User.email == "alice@example.com").all()
    assert len(users) == 1
    assert users[0].password != PASSWORD
    assert users[0].plan.name == "free"
    assert users[0].remaining_tries == 50
    active = (db_session.query(VerificationCode)
              .filter(VerificationCode.user_id == users[0].id,
                      VerificationCode.is_active.is_(True))
              .count())
    assert active >= 1


def test_signup_validation_and_duplicates(client):
    res = client.post("/api/auth/user/signup", json={"email": "a@example.com"})
    assert res.status_code == 400
    assert res.get_json()["error"].startswith("Missing required fields")

    res = signup(client, password="short")
    assert res.status_code == 400

    res = client.post("/api/auth/user/signup", json={
        "email": "alice@example.com", "username": "alice",
        "password": PASSWORD, "confirmPassword": "different1",
    })
    assert res.status_code == 400
    assert res.get_json()["error"] == "Passwords do not match"

    assert signup(client).status_code == 201
    assert signup(client, username="alice2").status_code == 409
    assert signup(client, email="other@example.com").status_code == 409


def test_signup_verify_signin_flow(client):
    res = signup(client)
    code = res.get_json()["data"]["verificationCode"]

    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": PASSWORD})
    assert res.status_code == 403
    assert res.get_json()["needsVerification"] is True

    res = client.post("/api/auth/user/verify",
                      json={"email": "alice@example.com", "code": _other_code(code)})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Invalid or expired verification code"

    res = client.post("/api/auth/user/verify", json={"email": "alice@example.com", "code": code})
    assert res.status_code == 200

    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": PASSWORD})
    assert res.status_code == 200
    body = res.get_json()
    assert body["data"]["token"]
    assert body["data"]["user"]["_count"] == {"chatSessions": 0}
    assert "token=" in res.headers.get("Set-Cookie", "")
    assert "HttpOnly" in res.headers.get("Set-Cookie", "")


def test_signin_wrong_password(client):
    register_user(client)
    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": "wrongpass1"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Email or password is incorrect"


def test_signin_requires_fields(client):
    res = client.post("/api/auth/user/signin", json={"email": "alice@example.com"})
    assert res.status_code == 400


def test_resend_verification_replaces_code(client):
    first = signup(client).get_json()["data"]["verificationCode"]
    res = client.post("/api/auth/user/resend-verification", json={"email": "alice@example.com"})
    assert res.status_code == 200
    second = res.get_json()["data"]["verificationCode"]

    if first != second:
        res = client.post("/api/auth/user/verify",
                          json={"email": "alice@example.com", "code": first})
        assert res.status_code == 400

    res = client.post("/api/auth/user/verify", json={"email": "alice@example.com", "code": second})
    assert res.status_code == 200

    res = client.post("/api/auth/user/resend-verification", json={"email": "alice@example.com"})
    assert res.status_code == 400


def test_verify_with_resend_action(client):
    signup(client)
    res = client.post("/api/auth/user/verify",
                      json={"email": "alice@example.com", "action": "resend"})
    assert res.status_code == 200
    code = res.get_json()["data"]["verificationCode"]

    res = client.post("/api/auth/user/verify", json={"email": "alice@example.com", "code": code})
    assert res.status_code == 200


def test_password_reset_flow_and_replay(client):
    register_user(client)
    res = client.post("/api/auth/user/forgot-password", json={"email": "alice@example.com"})
    assert res.status_code == 200
    code = res.get_json()["data"]["verificationCode"]

    res = client.post("/api/auth/user/verify-reset-code",
                      json={"email": "alice@example.com", "code": code})
    assert res.status_code == 200

    reset = {"email": "alice@example.com", "code": code,
             "password": "newpassword1", "confirmPassword": "newpassword1"}
    res = client.post("/api/auth/user/reset-password", json=reset)
    assert res.status_code == 200
    assert res.get_json()["message"] == "Password reset successfully"

    res = client.post("/api/auth/user/reset-password", json=reset)
    assert res.status_code == 400
    assert res.get_json()["error"] == \
        "No valid verification code found. Please request a new code."

    res = client.post("/api/auth/user/signin",
                      json={"email": "alice@example.com", "password": "newpassword1"})
    assert res.status_code == 200


def test_forgot_password_unknown_email(client):
    res = client.post("/api/auth/user/forgot-password", json={"email": "nobody@example.com"})
    assert res.status_code == 404


def test_reset_password_missing_fields(client):
    res = client.post("/api/auth/user/reset-password", json={"email": "alice@example.com"})
    assert res.status_code == 400
    assert "code" in res.get_json()["error"]


def test_admin_signin_and_reset(client):
    res = client.post("/api/auth/admin/signin",
                      json={"email": "root@example.com", "password": "wrongpassword"})
    assert res.status_code == 401

    res = client.post("/api/auth/admin/forgot-password", json={"email": "root@example.com"})
    assert res.status_code == 200
    code = res.get_json()["data"]["verificationCode"]

    res = client.post("/api/auth/admin/reset-password", json={
        "email": "root@example.com", "code": code, "password": "brandnewpass",
    })
    assert res.status_code == 200

    res = client.post("/api/auth/admin/signin",
                      json={"email": "root@example.com", "password": "brandnewpass"})
    assert res.status_code == 200
    assert res.get_json()["data"]["admin"]["role"] == "SUPER_ADMIN"


def test_user_code_cannot_reset_admin(client):
    register_user(client)
    res = client.post("/api/auth/user/forgot-password", json={"email": "alice@example.com"})
    code = res.get_json()["data"]["verificationCode"]
    res = client.post("/api/auth/admin/reset-password", json={
        "email": "root@example.com", "code": code, "password": "brandnewpass",
    })
    assert res.status_code == 400


def test_signout_clears_cookie(client):
    register_user(client)
    res = client.post("/api/auth/signout")
    assert res.status_code == 200
    cookie = res.headers.get("Set-Cookie", "")
    assert cookie.startswith("token=")
    assert "Expires=Thu, 01 Jan 1970" in cookie or "Max-Age=0" in cookie


def test_user_token_cannot_reach_admin_routes(client):
    token = register_user(client)
    res = client.get("/api/admin/dashboard-stats", headers=auth_header(token))
    assert res.status_code == 403


def test_method_not_allowed_envelope(client):
    res = client.get("/api/auth/user/signup")
    assert res.status_code == 405
    assert res.get_json() == {"success": False, "error": "Method not allowed"}


def test_wrongly_typed_fields_are_rejected(client):
    signup(client)
    cases = [
        ("/api/auth/user/signin", {"email": 123, "password": PASSWORD}),
        ("/api/auth/user/signin", {"email": "alice@example.com", "password": 12345678}),
        ("/api/auth/admin/signin", {"email": ["root@example.com"], "password": "rootpassword"}),
        ("/api/auth/user/verify", {"email": 123, "code": "123456"}),
        ("/api/auth/user/verify", {"email": {"a": 1}, "action": "resend"}),
        ("/api/auth/user/verify", {"email": "alice@example.com", "code": ["123456"]}),
        ("/api/auth/user/resend-verification", {"email": 123}),
        ("/api/auth/user/forgot-password", {"email": 123}),
        ("/api/auth/admin/forgot-password", {"email": True}),
        ("/api/auth/user/verify-reset-code", {"email": 123, "code": "123456"}),
        ("/api/auth/user/reset-password",
         {"email": 123, "code": "123456", "password": "newpassword1"}),
        ("/api/auth/user/reset-password",
         {"email": "alice@example.com", "code": "123456", "password": 12345678}),
    ]
    for url, body in cases:
        res = client.post(url, json=body)
        assert res.status_code == 400, (url, body)
        assert res.get_json()["success"] is False


def test_non_object_json_body_is_rejected(client):
    for url in ("/api/auth/user/signup", "/api/auth/user/signin", "/api/auth/user/verify"):
        res = client.post(url, json=["alice@example.com", PASSWORD])
        assert res.status_code == 400, url
        res = client.post(url, data="not json", content_type="application/json")
        assert res.status_code == 400, url

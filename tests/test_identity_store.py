import pytest
import requests

from nextai.services.identity_store import (
    AccountView,
    IdentityStore,
    MemoryTokenStorage,
    http_profile_loader,
)

ALICE = AccountView(id="u1", email="alice@example.com", username="alice",
                    is_verified=True, plan="free", remaining_credits=50)


def _loader(accounts):
    def load(token):
        if token not in accounts:
            raise PermissionError("token rejected")
        return accounts[token]
    return load


def test_init_without_token():
    store = IdentityStore(MemoryTokenStorage(), _loader({}))
    identity = store.init()
    assert not identity.is_authenticated
    assert not identity.is_loading


def test_init_restores_session():
    storage = MemoryTokenStorage("tok")
    store = IdentityStore(storage, _loader({"tok": ALICE}))
    seen = []
    store.subscribe(seen.append)

    identity = store.init()
    assert identity.is_authenticated
    assert identity.account == ALICE
    assert [i.is_loading for i in seen] == [True, False]


def test_init_discards_rejected_token():
    storage = MemoryTokenStorage("stale")
    store = IdentityStore(storage, _loader({}))
    identity = store.init()
    assert not identity.is_authenticated
    assert storage.get() is None


def test_login_logout_and_updates():
    storage = MemoryTokenStorage()
    store = IdentityStore(storage, _loader({}))
    store.init()

    store.login(ALICE, "tok")
    assert storage.get() == "tok"
    assert store.identity.is_authenticated

    store.update_credits(49)
    assert store.identity.account.remaining_credits == 49
    store.update_profile(username="alice2", plan="pro")
    assert store.identity.account.username == "alice2"
    assert store.identity.account.plan == "pro"

    store.logout()
    assert storage.get() is None
    assert not store.identity.is_authenticated
    store.update_credits(10)
    assert store.identity.account is None


def test_teardown_drops_listeners():
    store = IdentityStore(MemoryTokenStorage(), _loader({}))
    seen = []
    store.subscribe(seen.append)
    store.init()
    store.teardown()
    store.login(ALICE, "tok")
    assert len(seen) == 1


def test_account_view_from_api_payload():
    view = AccountView.from_dict({
        "id": "u1", "email": "alice@example.com", "username": "alice",
        "isVerified": True, "remainingTries": 7, "plan": {"name": "pro"},
    })
    assert view.plan == "pro"
    assert view.remaining_credits == 7
    assert view.kind == "user"

    admin = AccountView.from_dict({"id": "a1", "email": "root@example.com",
                                   "username": "root", "role": "SUPER_ADMIN"})
    assert admin.kind == "admin"
    assert admin.plan == "free"


class _Resp:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self._payload


def test_http_profile_loader(monkeypatch):
    calls = []

    def fake_get(url, headers, timeout):
        calls.append((url, headers))
        if headers["Authorization"] != "Bearer good":
            return _Resp(401, {"success": False})
        return _Resp(200, {"success": True, "data": {"user": {
            "id": "u1", "email": "alice@example.com", "username": "alice",
            "isVerified": True, "remainingTries": 3, "plan": None,
        }}})

    monkeypatch.setattr(requests, "get", fake_get)
    load = http_profile_loader("http://api.local/")
    assert load("good").remaining_credits == 3
    assert calls[0][0] == "http://api.local/api/user/profile"
    with pytest.raises(requests.HTTPError):
        load("bad")

    store = IdentityStore(MemoryTokenStorage("bad"), load)
    assert not store.init().is_authenticated

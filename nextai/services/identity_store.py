# nextai/services/identity_store.py
"""Client-side holder of the signed-in account.

An ``IdentityStore`` is created explicitly, started with ``init()`` and
stopped with ``teardown()``. Nothing is kept at module level, so a process
can run several stores (one per browser tab, per test, ...).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Protocol

import requests

from nextai.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountView:
    id: str
    email: str
    username: str
    is_verified: bool = False
    plan: str = "free"
    remaining_credits: int = 0
    kind: str = "user"

    @classmethod
    def from_dict(cls, data: dict) -> "AccountView":
        """Build from a ``to_public_dict`` payload (user or admin)."""
        plan = data.get("plan")
        if isinstance(plan, dict):
            plan = plan.get("name")
        return cls(
            id=data["id"],
            email=data["email"],
            username=data.get("username", ""),
            is_verified=bool(data.get("isVerified", "role" in data)),
            plan=plan or settings.FREE_PLAN_NAME,
            remaining_credits=int(data.get("remainingTries") or 0),
            kind="admin" if "role" in data else "user",
        )


@dataclass(frozen=True)
class Identity:
    account: Optional[AccountView] = None
    token: Optional[str] = None
    is_loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None


class TokenStorage(Protocol):
    def get(self) -> Optional[str]: ...
    def set(self, token: str) -> None: ...
    def clear(self) -> None: ...


@dataclass
class MemoryTokenStorage:
    token: Optional[str] = None

    def get(self) -> Optional[str]:
        return self.token

    def set(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


ProfileLoader = Callable[[str], AccountView]


def http_profile_loader(base_url: str, timeout: float = 10) -> ProfileLoader:
    """Loader that asks the API for the profile behind a token."""
    def load(token: str) -> AccountView:
        resp = requests.get(
            f"{base_url.rstrip('/')}/api/user/profile",
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        resp.raise_for_status()
        body = resp.json()
        return AccountView.from_dict(body["data"]["user"])
    return load


class IdentityStore:
    def __init__(self, storage: TokenStorage, load_profile: ProfileLoader):
        self._storage = storage
        self._load_profile = load_profile
        self._identity = Identity()
        self._listeners: list[Callable[[Identity], None]] = []

    @property
    def identity(self) -> Identity:
        return self._identity

    def subscribe(self, listener: Callable[[Identity], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set(self, identity: Identity) -> None:
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)

    def init(self) -> Identity:
        """Restore the session from the persisted token, if any.

        A token the profile loader rejects is dropped without raising.
        """
        token = self._storage.get()
        if not token:
            self._set(Identity())
            return self._identity

        self._set(Identity(token=token, is_loading=True))
        try:
            account = self._load_profile(token)
        except Exception as e:  # any loader failure means "signed out"
            logger.info("discarding stored token: %s", e)
            self._storage.clear()
            self._set(Identity())
            return self._identity

        self._set(Identity(account=account, token=token))
        return self._identity

    def teardown(self) -> None:
        self._listeners.clear()
        self._identity = Identity()

    def login(self, account: AccountView, token: str) -> None:
        self._storage.set(token)
        self._set(Identity(account=account, token=token))

    def logout(self) -> None:
        self._storage.clear()
        self._set(Identity())

    def update_credits(self, remaining: int) -> None:
        if self._identity.account is None:
            return
        account = replace(self._identity.account, remaining_credits=remaining)
        self._set(replace(self._identity, account=account))

    def update_profile(self, **changes) -> None:
        if self._identity.account is None:
            return
        account = replace(self._identity.account, **changes)
        self._set(replace(self._identity, account=account))

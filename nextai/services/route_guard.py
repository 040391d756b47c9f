# nextai/services/route_guard.py
"""Page-access decisions for the web client.

``decide`` is a pure function of the path, the authentication flag and the
route table, so the same rules can be checked from tests or from any caller
that renders pages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Tuple

ALLOW = "allow"
REDIRECT_TO_LOGIN = "redirect-to-login"
REDIRECT_TO_DASHBOARD = "redirect-to-dashboard"

RouteAction = Literal["allow", "redirect-to-login", "redirect-to-dashboard"]

LOGIN_PATH = "/"
DASHBOARD_PATH = "/dashboard/user"


@dataclass(frozen=True)
class RouteTable:
    protected: Tuple[str, ...] = ()
    public_only: Tuple[str, ...] = ()
    public: Tuple[str, ...] = ()

    def extend(self, protected: Iterable[str] = (), public_only: Iterable[str] = (),
               public: Iterable[str] = ()) -> "RouteTable":
        """New table with extra routes appended to each list."""
        return RouteTable(
            protected=self.protected + tuple(protected),
            public_only=self.public_only + tuple(public_only),
            public=self.public + tuple(public),
        )


DEFAULT_ROUTES = RouteTable(
    protected=(
        "/dashboard",
        "/dashboard/user",
        "/dashboard/admin",
        "/settings",
        "/profile",
        "/chat",
    ),
    public_only=(
        "/auth/user/signin",
        "/auth/user/signup",
        "/auth/user/forgot-password",
        "/auth/user/verify",
        "/auth/user/reset-password",
        "/auth/admin/signin",
        "/auth/admin/signup",
    ),
    public=(
        "/",
        "/about",
        "/contact",
        "/privacy-policy",
        "/terms-of-service",
        "/legal/privacy-policy",
        "/legal/terms-of-service",
    ),
)


def normalize_path(path: str) -> str:
    for sep in ("?", "#"):
        path = path.split(sep, 1)[0]
    return path or "/"


def matches(routes: Iterable[str], path: str) -> bool:
    # "/dashboard" covers "/dashboard/user" but not "/dashboards"
    return any(path == r or path.startswith(r + "/") for r in routes)


def decide(path: str, is_authenticated: bool, table: RouteTable = DEFAULT_ROUTES) -> RouteAction:
    path = normalize_path(path)
    if matches(table.protected, path):
        return ALLOW if is_authenticated else REDIRECT_TO_LOGIN
    if matches(table.public_only, path):
        return REDIRECT_TO_DASHBOARD if is_authenticated else ALLOW
    if matches(table.public, path):
        return ALLOW
    # Unknown pages are treated as protected
    return ALLOW if is_authenticated else REDIRECT_TO_LOGIN


def redirect_target(action: RouteAction, login_path: str = LOGIN_PATH,
                    dashboard_path: str = DASHBOARD_PATH) -> str | None:
    if action == REDIRECT_TO_LOGIN:
        return login_path
    if action == REDIRECT_TO_DASHBOARD:
        return dashboard_path
    return None

import pytest

from nextai.services.route_guard import (
    ALLOW,
    DEFAULT_ROUTES,
    REDIRECT_TO_DASHBOARD,
    REDIRECT_TO_LOGIN,
    RouteTable,
    decide,
    redirect_target,
)


@pytest.mark.parametrize("path, authed, expected", [
    ("/dashboard", False, REDIRECT_TO_LOGIN),
    ("/dashboard", True, ALLOW),
    ("/dashboard/user/settings", False, REDIRECT_TO_LOGIN),
    ("/chat?session=1", False, REDIRECT_TO_LOGIN),
    ("/auth/user/signin", False, ALLOW),
    ("/auth/user/signin", True, REDIRECT_TO_DASHBOARD),
    ("/auth/user/verify#code", True, REDIRECT_TO_DASHBOARD),
    ("/", False, ALLOW),
    ("/", True, ALLOW),
    ("/legal/privacy-policy", False, ALLOW),
    ("/about/team", False, ALLOW),
    ("/somewhere-else", False, REDIRECT_TO_LOGIN),
    ("/somewhere-else", True, ALLOW),
])
def test_default_table(path, authed, expected):
    assert decide(path, authed) == expected


def test_prefix_match_needs_a_separator():
    assert decide("/chatroom", False) == REDIRECT_TO_LOGIN
    table = RouteTable(public=("/chat",))
    assert decide("/chatroom", False, table) == REDIRECT_TO_LOGIN
    assert decide("/chat/1", False, table) == ALLOW


def test_protected_wins_over_public():
    table = DEFAULT_ROUTES.extend(public=("/dashboard",))
    assert decide("/dashboard", False, table) == REDIRECT_TO_LOGIN


def test_extend_keeps_defaults():
    table = DEFAULT_ROUTES.extend(public=("/pricing",))
    assert decide("/pricing", False, table) == ALLOW
    assert decide("/contact", False, table) == ALLOW


def test_redirect_targets():
    assert redirect_target(REDIRECT_TO_LOGIN) == "/"
    assert redirect_target(REDIRECT_TO_DASHBOARD) == "/dashboard/user"
    assert redirect_target(ALLOW) is None

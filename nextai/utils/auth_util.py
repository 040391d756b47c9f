# nextai/utils/auth_util.py
"""Per-request identity resolution for protected endpoints.

The token comes from ``Authorization: Bearer`` first, then the session
cookie. The resolved account is stored on ``flask.g`` and handed to the view
as its first argument; nothing about the caller lives in module state.
"""
from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Optional

from flask import g, request

from nextai.config import settings
from nextai.errors import AuthError, ForbiddenError
from nextai.models import Admin, User
from nextai.utils.db_util import get_request_session
from nextai.utils.jwt_util import decode_token, parse_bearer_token


@dataclass(frozen=True)
class Identity:
    account_id: str
    kind: str  # "user" | "admin"


def get_request_token() -> Optional[str]:
    token = parse_bearer_token(request.headers.get("Authorization"))
    if token:
        return token
    return request.cookies.get(settings.TOKEN_COOKIE_NAME) or None


def get_identity() -> Optional[Identity]:
    """Decode the caller's token without touching the database."""
    if "identity" in g:
        return g.identity
    claims = decode_token(get_request_token() or "")
    identity = None
    if claims and claims.get("sub"):
        identity = Identity(account_id=str(claims["sub"]), kind=claims.get("kind", "user"))
    g.identity = identity
    return identity


def _load_user() -> User:
    if not get_request_token():
        raise AuthError("No token provided")
    identity = get_identity()
    if identity is None or identity.kind != "user":
        raise AuthError("Invalid token")
    user = get_request_session().get(User, identity.account_id)
    if user is None:
        raise AuthError("Invalid token")
    if user.is_ban:
        raise ForbiddenError("User is banned")
    return user


def _load_admin(super_only: bool) -> Admin:
    if not get_request_token():
        raise AuthError("No token provided")
    identity = get_identity()
    if identity is None:
        raise AuthError("Invalid token")
    if identity.kind != "admin":
        raise ForbiddenError("Admin access required")
    admin = get_request_session().get(Admin, identity.account_id)
    if admin is None:
        raise AuthError("Invalid token")
    if not admin.is_active:
        raise ForbiddenError("Admin account is not active")
    if super_only and not admin.is_super_admin:
        raise ForbiddenError("Only super admins can perform this action")
    return admin


def require_user(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        user = _load_user()
        g.current_user = user
        return view(user, *args, **kwargs)
    return wrapper


def require_admin(view=None, *, super_only: bool = False):
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            admin = _load_admin(super_only)
            g.current_admin = admin
            return fn(admin, *args, **kwargs)
        return wrapper

    if view is not None:
        return decorator(view)
    return decorator


def optional_user_id() -> Optional[str]:
    """User id from a valid user token, or None (used by the contact form)."""
    identity = get_identity()
    if identity is None or identity.kind != "user":
        return None
    return identity.account_id

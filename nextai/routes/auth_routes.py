# nextai/routes/auth_routes.py
from flask import Blueprint

from nextai.config import settings
from nextai.services import auth_service
from nextai.services.auth_service import KIND_ADMIN, KIND_USER
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import fail, from_result, json_body, ok
from nextai.utils.validators import missing_fields, text_field

auth_bp = Blueprint("auth_bp", __name__)


def _set_token_cookie(response, token: str):
    response.set_cookie(
        settings.TOKEN_COOKIE_NAME,
        token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="Strict",
        path="/",
    )
    return response


def _with_cookie(res: dict):
    """from_result, plus the session cookie when the result carries a token."""
    token = (res.get("data") or {}).get("token") if res.get("success") else None
    response, status = from_result(res)
    if token:
        _set_token_cookie(response, token)
    return response, status


# ---------- user ----------

@auth_bp.route("/user/signup", methods=["POST"])
def user_signup():
    res = auth_service.signup_user(get_request_session(), json_body())
    return from_result(res)


@auth_bp.route("/user/verify", methods=["POST"])
def user_verify():
    data = json_body()
    if data.get("action") == "resend":
        email = text_field(data, "email")
        if not email:
            return fail("Email is required")
        return from_result(auth_service.resend_verification(get_request_session(), email))
    if not text_field(data, "email") or missing_fields(data, "code"):
        return fail("Email and verification code are required")
    res = auth_service.verify_user_email(get_request_session(), data["email"], data["code"])
    return from_result(res)


@auth_bp.route("/user/resend-verification", methods=["POST"])
def user_resend_verification():
    email = text_field(json_body(), "email")
    if not email:
        return fail("Email is required")
    return from_result(auth_service.resend_verification(get_request_session(), email))


@auth_bp.route("/user/signin", methods=["POST"])
def user_signin():
    data = json_body()
    if not text_field(data, "email") or not text_field(data, "password"):
        return fail("Email and password are required")
    res = auth_service.signin_user(get_request_session(), data["email"], data["password"])
    return _with_cookie(res)


# ---------- admin ----------

@auth_bp.route("/admin/signin", methods=["POST"])
def admin_signin():
    data = json_body()
    if not text_field(data, "email") or not text_field(data, "password"):
        return fail("Email and password are required")
    res = auth_service.signin_admin(get_request_session(), data["email"], data["password"])
    return _with_cookie(res)


# ---------- password reset, shared by both account kinds ----------

def _forgot(kind: str):
    email = text_field(json_body(), "email")
    if not email:
        return fail("Email is required")
    return from_result(auth_service.forgot_password(get_request_session(), email, kind))


def _verify_reset(kind: str):
    data = json_body()
    if not text_field(data, "email") or missing_fields(data, "code"):
        return fail("Email and verification code are required")
    res = auth_service.verify_reset_code(get_request_session(), data["email"], data["code"], kind)
    return from_result(res)


def _reset(kind: str):
    return from_result(auth_service.reset_password(get_request_session(), json_body(), kind))


for _kind in (KIND_USER, KIND_ADMIN):
    auth_bp.add_url_rule(f"/{_kind}/forgot-password", f"{_kind}_forgot_password",
                         lambda kind=_kind: _forgot(kind), methods=["POST"])
    auth_bp.add_url_rule(f"/{_kind}/verify-reset-code", f"{_kind}_verify_reset_code",
                         lambda kind=_kind: _verify_reset(kind), methods=["POST"])
    auth_bp.add_url_rule(f"/{_kind}/reset-password", f"{_kind}_reset_password",
                         lambda kind=_kind: _reset(kind), methods=["POST"])


@auth_bp.route("/signout", methods=["POST"])
def signout():
    response, status = ok(message="Signed out successfully")
    response.delete_cookie(settings.TOKEN_COOKIE_NAME, path="/", samesite="Strict",
                           secure=settings.is_production, httponly=True)
    return response, status

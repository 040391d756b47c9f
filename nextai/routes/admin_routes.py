# nextai/routes/admin_routes.py
from flask import Blueprint

from nextai.errors import ValidationError
from nextai.services import admin_service
from nextai.utils.auth_util import require_admin
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import from_result, json_body, ok

admin_bp = Blueprint("admin_bp", __name__)


@admin_bp.route("/dashboard-stats", methods=["GET"])
@require_admin
def dashboard_stats(admin):
    return ok(admin_service.get_dashboard_stats(get_request_session(), admin))


@admin_bp.route("/create-admin", methods=["POST"])
@require_admin(super_only=True)
def create_admin(admin):
    data = json_body()
    return from_result(admin_service.create_admin(get_request_session(), admin, data))


@admin_bp.route("/contacts", methods=["GET"])
@require_admin
def contacts(admin):
    return ok(admin_service.list_contacts(get_request_session()))


@admin_bp.route("/contacts/<contact_id>/resolve", methods=["POST"])
@require_admin
def resolve_contact(admin, contact_id):
    return from_result(admin_service.resolve_contact(get_request_session(), admin, contact_id))


@admin_bp.route("/users", methods=["GET"])
@require_admin
def users(admin):
    return ok(admin_service.list_users(get_request_session()))


@admin_bp.route("/users/<user_id>/ban", methods=["POST"])
@require_admin
def ban_user(admin, user_id):
    data = json_body()
    banned = data.get("banned")
    if not isinstance(banned, bool):
        raise ValidationError("banned must be true or false")
    return from_result(admin_service.set_user_ban(get_request_session(), user_id, banned))

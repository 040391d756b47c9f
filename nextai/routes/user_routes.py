# nextai/routes/user_routes.py
from flask import Blueprint

from nextai.services import user_service
from nextai.utils.auth_util import require_user
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import from_result, json_body, ok

user_bp = Blueprint("user_bp", __name__)


@user_bp.route("/profile", methods=["GET"])
@require_user
def profile(user):
    return ok({"user": user_service.get_user_profile(get_request_session(), user)})


@user_bp.route("/update-profile", methods=["PUT"])
@require_user
def update_profile(user):
    return from_result(user_service.update_user_profile(get_request_session(), user, json_body()))


@user_bp.route("/change-password", methods=["PUT"])
@require_user
def change_password(user):
    return from_result(user_service.change_password(get_request_session(), user, json_body()))


@user_bp.route("/delete-account", methods=["DELETE"])
@require_user
def delete_account(user):
    return from_result(user_service.delete_account(get_request_session(), user))


@user_bp.route("/update-plan", methods=["POST"])
@require_user
def update_plan(user):
    res = user_service.update_plan(get_request_session(), user, json_body().get("planId"))
    return from_result(res)


@user_bp.route("/usage-stats", methods=["GET"])
@require_user
def usage_stats(user):
    return ok(user_service.get_usage_stats(get_request_session(), user))

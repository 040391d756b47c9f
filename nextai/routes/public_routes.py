# nextai/routes/public_routes.py
from flask import Blueprint

from nextai.services import contact_service, plan_service
from nextai.utils.auth_util import optional_user_id
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import from_result, json_body, ok

public_bp = Blueprint("public_bp", __name__)


@public_bp.route("/plans", methods=["GET"])
def plans():
    return ok(plans=plan_service.list_plans(get_request_session()))


@public_bp.route("/contact", methods=["POST"])
def contact():
    data = json_body()
    res = contact_service.submit_contact(get_request_session(), data, optional_user_id())
    return from_result(res)

# nextai/routes/chat_routes.py
from flask import Blueprint, request

from nextai.services import chat_service
from nextai.utils.auth_util import require_user
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import from_result, json_body, ok

chat_bp = Blueprint("chat_bp", __name__)


@chat_bp.route("/sessions", methods=["GET"])
@require_user
def list_sessions(user):
    return ok(sessions=chat_service.list_sessions(get_request_session(), user))


@chat_bp.route("/sessions", methods=["POST"])
@require_user
def create_session(user):
    res = chat_service.create_session(get_request_session(), user, json_body().get("title"))
    return from_result(res)


@chat_bp.route("/sessions", methods=["DELETE"])
@require_user
def delete_session(user):
    session_id = json_body().get("sessionId") or request.args.get("sessionId")
    return from_result(chat_service.delete_session(get_request_session(), user, session_id))


@chat_bp.route("/message", methods=["POST"])
@require_user
def add_message(user):
    return from_result(chat_service.add_message(get_request_session(), user, json_body()))


@chat_bp.route("/generate", methods=["POST"])
@require_user
def generate(user):
    data = json_body()
    res = chat_service.generate_reply(
        get_request_session(), user, data.get("sessionId"), data.get("message")
    )
    return from_result(res)

# nextai/routes/friend_routes.py
from flask import Blueprint

from nextai.services import friend_service
from nextai.utils.auth_util import require_user
from nextai.utils.db_util import get_request_session
from nextai.utils.responses import from_result, json_body, ok

friend_bp = Blueprint("friend_bp", __name__)


@friend_bp.route("/request", methods=["POST"])
@require_user
def send_request(user):
    res = friend_service.send_request(get_request_session(), user, json_body().get("receiverId"))
    return from_result(res)


@friend_bp.route("/accept", methods=["POST"])
@friend_bp.route("/accept-request", methods=["POST"])
@require_user
def accept(user):
    data = json_body()
    res = friend_service.accept_request(get_request_session(), user,
                                        data.get("friendshipId"), data.get("requesterId"))
    return from_result(res)


@friend_bp.route("/reject", methods=["POST"])
@require_user
def reject(user):
    data = json_body()
    res = friend_service.reject_request(get_request_session(), user,
                                        data.get("friendshipId"), data.get("requesterId"))
    return from_result(res)


@friend_bp.route("/decline-request", methods=["POST"])
@require_user
def decline(user):
    res = friend_service.decline_request(get_request_session(), user,
                                         json_body().get("requesterId"))
    return from_result(res)


@friend_bp.route("/list", methods=["GET"])
@require_user
def list_friends(user):
    return ok(friends=friend_service.list_friends(get_request_session(), user))


@friend_bp.route("/requests", methods=["GET"])
@require_user
def incoming_requests(user):
    return ok(requests=friend_service.list_incoming_requests(get_request_session(), user))


@friend_bp.route("/status", methods=["GET"])
@require_user
def status(user):
    return ok(friendships=friend_service.friendship_statuses(get_request_session(), user))

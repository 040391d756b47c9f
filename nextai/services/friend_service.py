# nextai/services/friend_service.py
from __future__ import annotations

import logging

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nextai.models import Friendship, User
from nextai.models.friendship_model import STATUS_ACCEPTED, STATUS_PENDING, STATUS_REJECTED
from nextai.utils.time_util import isoformat_or_none

logger = logging.getLogger(__name__)

# Values of the status map, as seen by the caller
PENDING_SENT = "pending_sent"
PENDING_RECEIVED = "pending_received"
ACCEPTED = "accepted"
REJECTED = "rejected"


def _is_id(value) -> bool:
    return isinstance(value, str) and bool(value)


def _between(a: str, b: str):
    return or_(
        and_(Friendship.requester_id == a, Friendship.receiver_id == b),
        and_(Friendship.requester_id == b, Friendship.receiver_id == a),
    )


def _involving(user_id: str):
    return or_(Friendship.requester_id == user_id, Friendship.receiver_id == user_id)


def _user_row(other: User) -> dict:
    return {
        "id": other.id,
        "username": other.username,
        "email": other.email,
        "isVerified": other.is_verified,
        "lastActiveAt": isoformat_or_none(other.last_active_at),
    }


def send_request(session: Session, user: User, receiver_id) -> dict:
    if not _is_id(receiver_id):
        return {"success": False, "status": 400, "message": "Receiver ID is required"}
    if receiver_id == user.id:
        return {"success": False, "status": 400,
                "message": "Cannot send friend request to yourself"}
    if session.get(User, receiver_id) is None:
        return {"success": False, "status": 404, "message": "User not found"}
    if session.query(Friendship.id).filter(_between(user.id, receiver_id)).first():
        return {"success": False, "status": 400,
                "message": "Friendship request already exists or you are already friends"}

    friendship = Friendship(requester_id=user.id, receiver_id=receiver_id, status=STATUS_PENDING)
    try:
        session.add(friendship)
        session.commit()
    except IntegrityError:
        session.rollback()
        return {"success": False, "status": 400,
                "message": "Friendship request already exists or you are already friends"}

    logger.info("friend request %s: %s -> %s", friendship.id, user.id, receiver_id)
    return {"success": True, "status": 201, "message": "Friend request sent successfully",
            "friendshipId": friendship.id}


def _pending_for_receiver(session: Session, user: User, friendship_id=None, requester_id=None):
    """(friendship, error_result) for a request addressed to ``user``.

    The request is named either by its id or by the user who sent it.
    """
    if _is_id(friendship_id):
        friendship = session.get(Friendship, friendship_id)
    elif _is_id(requester_id):
        friendship = (session.query(Friendship)
                      .filter(Friendship.requester_id == requester_id,
                              Friendship.receiver_id == user.id)
                      .first())
    else:
        return None, {"success": False, "status": 400,
                      "message": "Friendship ID or requester ID is required"}

    if friendship is None or friendship.receiver_id != user.id:
        return None, {"success": False, "status": 404, "message": "Friend request not found"}
    if friendship.status != STATUS_PENDING:
        return None, {"success": False, "status": 400,
                      "message": "Friend request is no longer pending"}
    return friendship, None


def accept_request(session: Session, user: User, friendship_id=None, requester_id=None) -> dict:
    friendship, err = _pending_for_receiver(session, user, friendship_id, requester_id)
    if err:
        return err
    friendship.status = STATUS_ACCEPTED
    session.commit()
    return {"success": True, "status": 200, "message": "Friend request accepted successfully",
            "friendshipId": friendship.id}


def reject_request(session: Session, user: User, friendship_id=None, requester_id=None) -> dict:
    friendship, err = _pending_for_receiver(session, user, friendship_id, requester_id)
    if err:
        return err
    friendship.status = STATUS_REJECTED
    session.commit()
    return {"success": True, "status": 200, "message": "Friend request rejected successfully",
            "friendshipId": friendship.id}


def decline_request(session: Session, user: User, requester_id) -> dict:
    if not _is_id(requester_id):
        return {"success": False, "status": 400, "message": "Requester ID is required"}
    friendship = (session.query(Friendship)
                  .filter(Friendship.requester_id == requester_id,
                          Friendship.receiver_id == user.id,
                          Friendship.status == STATUS_PENDING)
                  .first())
    if friendship is None:
        return {"success": False, "status": 404, "message": "Friend request not found"}
    session.delete(friendship)
    session.commit()
    return {"success": True, "status": 200, "message": "Friend request declined successfully"}


def list_friends(session: Session, user: User) -> list[dict]:
    rows = (session.query(Friendship)
            .filter(_involving(user.id), Friendship.status == STATUS_ACCEPTED)
            .order_by(Friendship.updated_at.desc())
            .all())
    return [
        {**_user_row(f.other_party(user.id)), "status": ACCEPTED, "friendshipId": f.id}
        for f in rows
    ]


def list_incoming_requests(session: Session, user: User) -> list[dict]:
    """Pending requests addressed to ``user``, newest first."""
    rows = (session.query(Friendship)
            .filter(Friendship.receiver_id == user.id, Friendship.status == STATUS_PENDING)
            .order_by(Friendship.created_at.desc())
            .all())
    return [
        {"friendshipId": f.id, "requester": _user_row(f.requester),
         "createdAt": isoformat_or_none(f.created_at)}
        for f in rows
    ]


def _status_for(friendship: Friendship, user_id: str) -> str:
    if friendship.status == STATUS_PENDING:
        return PENDING_SENT if friendship.requester_id == user_id else PENDING_RECEIVED
    if friendship.status == STATUS_ACCEPTED:
        return ACCEPTED
    return REJECTED


def friendship_statuses(session: Session, user: User) -> dict[str, str]:
    """Map of other user id -> status from the caller's side."""
    rows = session.query(Friendship).filter(_involving(user.id)).all()
    return {
        (f.receiver_id if f.requester_id == user.id else f.requester_id): _status_for(f, user.id)
        for f in rows
    }

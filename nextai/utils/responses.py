# nextai/utils/responses.py
from flask import jsonify, request


def ok(data=None, message: str | None = None, status: int = 200, **extra):
    """{"success": true, "data"?, "message"?, ...}"""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def fail(error: str, status: int = 400, **extra):
    body = {"success": False, "error": error}
    body.update(extra)
    return jsonify(body), status


def from_result(res: dict, success_status: int = 200):
    """Turn a service result dict into an HTTP response.

    Services return {"success": bool, "status"?: int, "message": str, ...};
    the extra keys are passed through.
    """
    res = dict(res)
    success = res.pop("success", False)
    status = res.pop("status", None)
    message = res.pop("message", None)
    if success:
        return ok(message=message, status=status or success_status, **res)
    return fail(message or "Request failed", status=status or 400, **res)


def json_body() -> dict:
    """The request's JSON object, or {} for a missing, invalid or non-object body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

from functools import wraps

from flask import current_app, jsonify, request

from bunko.services.admin_session import AdminSessionService


def admin_session():
    return AdminSessionService.from_config(current_app.config)


def is_admin_request():
    token = request.cookies.get(current_app.config["ADMIN_SESSION_COOKIE"])
    return admin_session().check(token)


def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_admin_request():
            return jsonify({"error": "login_required"}), 401
        return view(*args, **kwargs)

    return wrapped

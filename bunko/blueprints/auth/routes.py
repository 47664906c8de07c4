from flask import current_app, jsonify, request

from bunko.blueprints.auth import auth_bp
from bunko.blueprints.auth.guards import admin_session, is_admin_request
from bunko.services.admin_session import SessionNotConfigured


@auth_bp.route("/api/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    try:
        token = admin_session().login(username, password)
    except SessionNotConfigured as exc:
        current_app.logger.error("%s", exc)
        return jsonify({"error": "Admin credentials not configured"}), 500
    if token is None:
        current_app.logger.info("Rejected admin login for %r", username)
        return jsonify({"error": "Invalid credentials"}), 401
    response = jsonify({"success": True})
    response.set_cookie(
        current_app.config["ADMIN_SESSION_COOKIE"],
        token,
        max_age=current_app.config["ADMIN_SESSION_MAX_AGE"],
        httponly=True,
        secure=current_app.config.get("ADMIN_SESSION_SECURE", False),
        samesite="Lax",
        path="/",
    )
    return response


@auth_bp.route("/api/auth/check", methods=["GET"])
def check():
    return jsonify({"authenticated": is_admin_request()})


@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    response = jsonify({"success": True})
    response.delete_cookie(current_app.config["ADMIN_SESSION_COOKIE"], path="/")
    return response

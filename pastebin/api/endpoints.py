"""The main endpoints file.

This module provides:
- register_endpoints: a function that binds endpoints onto an app with their rate limits
- register_error_handlers: a function that renders every error as ``{"error": ...}``
"""

from http import HTTPStatus

from flask import Blueprint, Flask, jsonify
from flask_limiter import Limiter
from werkzeug.exceptions import HTTPException

from ..utils.errors import PastebinError
from .auth import AuthAPI
from .pastes import PasteAPI


def register_endpoints(app: Flask, auth: AuthAPI, pastes: PasteAPI, limiter: Limiter):
    """Binds endpoints to a Flask app under ``/api``.

    Args:
        app (Flask): The app to bind endpoints to
        auth (AuthAPI): Account endpoints
        pastes (PasteAPI): Paste endpoints
        limiter (Limiter): The app's rate limiter
    """
    api_bp = Blueprint("api", __name__)
    auth_limit = limiter.shared_limit(
        app.config["AUTH_RATE_LIMIT"],
        scope="auth",
        error_message="Too many authentication attempts, please try again later.",
    )
    paste_limit = limiter.limit(
        app.config["PASTE_RATE_LIMIT"],
        error_message="Too many pastes created, please try again later.",
    )

    def add_route(url: str, endpoint: str, handler, methods: list[str]):
        api_bp.add_url_rule(url, endpoint=endpoint, view_func=handler, methods=methods)

    add_route("/auth/signup", "signup", auth_limit(auth.signup), ["POST"])
    add_route("/auth/signin", "signin", auth_limit(auth.signin), ["POST"])
    add_route("/auth/change-password", "change_password", auth.change_password, ["POST"])
    add_route("/auth/me", "me", auth.me, ["GET"])
    add_route("/auth/users", "list_users", auth.list_users, ["GET"])
    add_route("/auth/users/<int:user_id>/role", "update_role", auth.update_role, ["PATCH"])

    add_route("/pastes", "create_paste", paste_limit(pastes.create), ["POST"])
    add_route("/pastes/my-pastes", "my_pastes", pastes.my_pastes, ["GET"])
    add_route("/pastes/<share_id>", "fetch_paste", pastes.fetch, ["GET"])
    add_route("/pastes/<share_id>", "update_paste", pastes.update, ["PATCH"])
    add_route("/pastes/<share_id>", "delete_paste", pastes.delete, ["DELETE"])
    add_route("/pastes/<share_id>/shared-users", "shared_users", pastes.shared_users, ["GET"])
    add_route("/cleanup", "cleanup", pastes.cleanup, ["POST"])

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.get("/health")
    @limiter.exempt
    def health():
        return jsonify({"status": "ok"})


def register_error_handlers(app: Flask):
    """Renders errors as JSON. Unexpected ones are logged and stay opaque to the caller."""

    @app.errorhandler(PastebinError)
    def _pastebin_error(e: PastebinError):
        if e.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            app.logger.error("Internal error: %s", e, exc_info=e)
            return jsonify({"error": "Internal server error"}), e.status
        return jsonify({"error": e.message}), e.status

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        if e.code == HTTPStatus.NOT_FOUND:
            return jsonify({"error": "Route not found"}), e.code
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        app.logger.exception("Unhandled error: %s", e)
        return jsonify({"error": "Internal server error"}), HTTPStatus.INTERNAL_SERVER_ERROR

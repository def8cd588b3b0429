"""Pulls pieces together to brew a Flask of pastebin.

This module provides:
- create_app: a function to get a Flask considering a dev/prod/testing environment
"""

import time
from datetime import timedelta

from flask import Flask, g, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .api import AuthAPI, PasteAPI, register_endpoints, register_error_handlers
from .commands import bootstrap_admin, register_commands
from .config import config
from .glue import Glue
from .stores import PasteStore, UserStore
from .tokens import TokenIssuer
from .utils.clock import Clock, utcnow
from .utils.logging import setup_logging


def create_app(config_name="development", clock: Clock | None = None, **overrides):
    """Initializes a pastebin Flask app with its DB glue and stores.

    Args:
        config_name (str): One of ``development``, ``production`` or ``testing``
        clock (Clock | None): Where the app reads the current time from
        **overrides: Config values that win over the config class
    """
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.config.update(overrides)
    clock = clock or utcnow

    setup_logging(app)

    glue = Glue(app.config["DATABASE_URI"])
    users = UserStore(glue, clock=clock)
    pastes = PasteStore(glue)
    tokens = TokenIssuer(
        app.config["AUTH_SECRET"],
        lifetime=timedelta(days=app.config["TOKEN_LIFETIME_DAYS"]),
        clock=clock,
    )
    app.extensions["pastebin"] = {
        "glue": glue,
        "users": users,
        "pastes": pastes,
        "tokens": tokens,
        "clock": clock,
    }

    # route limits only keep a weak reference to the limiter
    limiter = app.extensions["pastebin"]["limiter"] = Limiter(
        get_remote_address,
        app=app,
        default_limits=[app.config["API_RATE_LIMIT"]],
        storage_uri=app.config["RATELIMIT_STORAGE_URI"],
    )

    auth_api = AuthAPI(
        users,
        tokens,
        bcrypt_rounds=app.config["BCRYPT_ROUNDS"],
        log_actions=app.config["LOG_ACTIONS"],
    )
    paste_api = PasteAPI(
        pastes,
        users,
        tokens,
        clock=clock,
        share_base_url=app.config["SHARE_BASE_URL"],
        log_actions=app.config["LOG_ACTIONS"],
    )
    register_endpoints(app, auth_api, paste_api, limiter)
    register_error_handlers(app)
    register_commands(app)
    bootstrap_admin(app)

    @app.before_request
    def _start_timer():
        g.start_time = time.time()

    @app.after_request
    def _log_request(response):
        if app.config["LOG_REQUESTS"]:
            duration = (time.time() - g.get("start_time", time.time())) * 1000
            log_message = (
                f"{request.remote_addr} - {request.method} {request.path} "
                f"HTTP/{request.environ.get('SERVER_PROTOCOL')} "
                f"{response.status_code} - {duration:.2f}ms"
            )
            app.logger.info(log_message)
        return response

    return app

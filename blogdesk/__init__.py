# -*- coding: utf-8 -*-
"""
Blogdesk — Flask application factory
Role-based access control for the blog, dashboards, profile and admin pages.
"""

import os
import logging
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from flask_babel import Babel
from werkzeug.exceptions import HTTPException
from logging.handlers import RotatingFileHandler
from config import Config

# ───────── Extensions ───────── #
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
babel = Babel()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.setdefault("SECRET_KEY", os.urandom(24))
    app.config.setdefault("LANGUAGES", ["en"])
    app.config.setdefault("BABEL_DEFAULT_LOCALE", "en")

    # ───────── Init extensions ───────── #
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    login_manager.init_app(app)

    # ───────── Flask-Login ───────── #
    from blogdesk.models.user import User

    @login_manager.user_loader
    def load_user(uid): return db.session.get(User, str(uid))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    # ───────── Babel ───────── #
    def get_locale():
        return (
            request.accept_languages.best_match(app.config["LANGUAGES"])
            or app.config["BABEL_DEFAULT_LOCALE"]
        )

    babel.init_app(app, locale_selector=get_locale)

    # ───────── Blueprints ───────── #
    from blogdesk.auth.routes import auth_bp
    from blogdesk.api.routes import api_bp
    from blogdesk.blog.routes import blog_bp
    from blogdesk.pages.routes import pages_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(blog_bp, url_prefix="/api/blog")
    app.register_blueprint(pages_bp, url_prefix="/pages")

    # ───────── Errors ───────── #
    from blogdesk.errors import AccessError

    @app.errorhandler(AccessError)
    def handle_access_error(exc):
        return jsonify({"error": str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"error": exc.description}), exc.code

    # ───────── CLI ───────── #
    from blogdesk.seeds import register_commands
    register_commands(app)

    # ───────── Logging ───────── #
    level = app.config.get("LOG_LEVEL", "INFO")
    if app.config.get("LOG_TO_FILE", True) and not app.config.get("TESTING"):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(log_dir, "blogdesk.log"), maxBytes=10240, backupCount=10)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app.logger.addHandler(handler)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
               for h in app.logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app.logger.addHandler(console_handler)

    app.logger.setLevel(level)
    app.logger.propagate = False

    # Store failures are logged by blogdesk.access_store.
    store_logger = logging.getLogger("blogdesk.access_store")
    store_logger.setLevel(level)

    if app.config.get("SQLALCHEMY_ECHO", False) or level == "DEBUG":
        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(logging.INFO)
        if not any(isinstance(h, logging.StreamHandler) for h in sql_logger.handlers):
            sql_console = logging.StreamHandler()
            sql_console.setFormatter(logging.Formatter("%(asctime)s [SQL] %(message)s"))
            sql_logger.addHandler(sql_console)
    app.logger.info("Blogdesk started")

    @app.route("/")
    def index():
        return jsonify({"name": "blogdesk", "status": "ok"})

    return app

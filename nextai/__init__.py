# nextai/__init__.py
import logging

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from nextai.config import settings
from nextai.db import init_db, session_scope
from nextai.errors import NextAIError
from nextai.routes.admin_routes import admin_bp
from nextai.routes.auth_routes import auth_bp
from nextai.routes.chat_routes import chat_bp
from nextai.routes.friend_routes import friend_bp
from nextai.routes.public_routes import public_bp
from nextai.routes.user_routes import user_bp
from nextai.services import plan_service
from nextai.utils.db_util import close_request_session
from nextai.utils.responses import fail

logger = logging.getLogger(__name__)

_HTTP_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(NextAIError)
    def handle_app_error(e: NextAIError):
        return fail(e.message, e.status_code, **e.extra)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(_HTTP_MESSAGES.get(e.code, e.name), e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error: %s", e)
        return fail("Internal server error", 500)


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        init_db()
        print("Tables created")

    @app.cli.command("seed")
    def seed_command():
        """Create tables, default plans and the configured super admin."""
        init_db()
        with session_scope() as session:
            created = plan_service.seed_plans(session)
            admin = plan_service.seed_super_admin(session)
        print(f"Plans created: {', '.join(created) or 'none'}")
        print("Super admin created" if admin else "Super admin already exists")


def create_app(create_tables: bool = True) -> Flask:
    _configure_logging()

    app = Flask(__name__)
    app.json.sort_keys = False
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] or "*"
    CORS(app, origins=origins, supports_credentials=origins != ["*"])

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(chat_bp, url_prefix="/api/chat")
    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(friend_bp, url_prefix="/api/friends")
    app.register_blueprint(public_bp, url_prefix="/api")

    app.teardown_appcontext(close_request_session)
    _register_error_handlers(app)
    _register_cli(app)

    if create_tables:
        init_db()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("Next-AI API ready (%s)", settings.ENVIRONMENT)
    return app

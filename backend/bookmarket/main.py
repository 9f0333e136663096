import logging
import os
import re

from dotenv import load_dotenv
from flask import Flask

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

logger = logging.getLogger(__name__)


# Helper to mask password in URLs to avoid leaking secrets in logs
def _mask_url_password(url: str) -> str:
    return re.sub(r"(://[^:/?#]+):[^@]*@", r"\1:***@", url)


def create_app() -> Flask:
    from bookmarket.core import config
    from bookmarket.core.api_utils import register_error_handlers
    from bookmarket.core.limiter_config import limiter
    from bookmarket.core.logging_config import setup_logging

    app = Flask(__name__)

    testing_env = os.getenv("TESTING", "").lower().strip()
    if testing_env in ("true", "1", "yes"):
        app.config["TESTING"] = True

    setup_logging(
        app=app,
        log_level=config.get_log_level(),
        log_to_file=config.get_log_to_file(),
        use_json_format=config.get_log_json(),
    )
    config.log_marketplace_config()
    logger.info(
        "Database configured",
        extra={"context": {"database_url": _mask_url_password(config.get_database_url())}},
    )

    # Bind limiter; tests switch it off with RATE_LIMIT_ENABLED=0
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", "memory://")
    app.config["RATELIMIT_ENABLED"] = config.get_rate_limit_enabled()
    limiter.init_app(app)
    if not config.get_rate_limit_enabled():
        limiter.enabled = False
        logger.info("Rate limiting disabled")

    register_error_handlers(app)

    from bookmarket.controllers.book_controller import book_bp
    from bookmarket.controllers.health_controller import health_bp
    from bookmarket.controllers.user_controller import user_bp

    app.register_blueprint(book_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(health_bp)

    from bookmarket.db.session import create_tables

    create_tables()
    logger.info("Database tables ensured")

    return app

"""
Health controller - liveness endpoint for monitoring.
"""

import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from bookmarket.core.api_utils import api_response
from bookmarket.db.session import SessionLocal

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
@health_bp.route("/", methods=["GET"])
def health_check():
    """Report process liveness and whether the database answers a ping.

    Status codes:
        200: database reachable
        503: database unreachable
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database ping failed",
            extra={"context": {"error": str(e)}},
        )
        database = "unavailable"
    finally:
        db.close()

    healthy = database == "ok"
    return api_response(
        healthy,
        "healthy" if healthy else "unhealthy",
        {"database": database},
        200 if healthy else 503,
    )

"""Health check endpoint."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from accounts.api.deps import json_response, timing
from accounts.core.extensions import db, get_redis

bp = Blueprint("health", __name__)

log = logging.getLogger(__name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database and Redis reachability.

    Answers 200 when both respond and 503 otherwise.
    """
    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("healthcheck.db_error")
        db_status = "fail"

    redis_status = "ok"
    try:
        get_redis().ping()
    except RedisError:
        log.exception("healthcheck.redis_error")
        redis_status = "fail"

    healthy = db_status == redis_status == "ok"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "redis": redis_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)

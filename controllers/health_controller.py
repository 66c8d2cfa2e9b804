# controllers/health_controller.py
from flask import Blueprint, current_app

from controllers.common import store
from utils.datetime_helpers import to_iso, utc_now
from utils.response import json_response

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    """存活探针：数据库不可达时返回 503。"""
    entity_store = store()
    database_ok = entity_store.ping()
    payload = {
        "status": "ok" if database_ok else "degraded",
        "timestamp": to_iso(utc_now()),
        "environment": current_app.config.get("ENV_NAME", "development"),
        "database": "connected" if database_ok else "unavailable",
        "uploads": "available" if entity_store.uploads_available() else "unavailable",
    }
    return json_response(payload, 200 if database_ok else 503)

# controllers/statistics_controller.py
from flask import Blueprint

from controllers.common import render_biz_error, store
from services.statistics_service import StatisticsService
from utils.exceptions import BizError
from utils.response import json_response

statistics_bp = Blueprint("statistics", __name__)


@statistics_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@statistics_bp.get("/api/statistics")
def overview():
    return json_response(StatisticsService(store()).overview())


@statistics_bp.get("/api/statistics/modules")
def by_module():
    return json_response(StatisticsService(store()).by_module())


@statistics_bp.get("/api/statistics/versions")
def by_version():
    return json_response(StatisticsService(store()).by_version())


@statistics_bp.get("/api/statistics/users")
def by_user():
    return json_response(StatisticsService(store()).by_user())


@statistics_bp.get("/api/dashboard")
def dashboard():
    return json_response(StatisticsService(store()).dashboard())

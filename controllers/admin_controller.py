# controllers/admin_controller.py
from flask import Blueprint

from controllers.common import render_biz_error, store
from services.admin_service import AdminService
from utils.exceptions import BizError
from utils.response import success_response

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@admin_bp.post("/reset-testing-data")
def reset_testing_data():
    """清空会话 / 结果 / 反馈 / 用例；用户与模块保留。"""
    summary = AdminService(store()).reset_testing_data()
    return success_response("Testing data has been cleared. Users and modules preserved.", **summary)


@admin_bp.post("/fix-prerequisites")
def fix_prerequisites():
    fixed = AdminService(store()).fix_prerequisites()
    return success_response(f"Fixed {fixed} tests, 0 errors", fixed=fixed, errors=0)


@admin_bp.post("/clean-corrupted-data")
def clean_corrupted_data():
    cleaned = AdminService(store()).clean_corrupted_data()
    return success_response(f"Cleaned {cleaned} records, 0 errors", cleaned=cleaned, errors=0)

# controllers/module_controller.py
from flask import Blueprint, request

from constants.catalog import ModuleStatus
from controllers.common import dump, json_body, render_biz_error, store
from services.module_service import ModuleService
from utils.exceptions import BizError
from utils.response import json_response, success_response

module_bp = Blueprint("modules", __name__, url_prefix="/api/modules")


@module_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@module_bp.get("")
def list_modules():
    """GET /api/modules?status=active|inactive|all（默认 active，按名称排序）"""
    status = request.args.get("status") or ModuleStatus.ACTIVE.value
    return json_response(dump(ModuleService(store()).list(status)))


@module_bp.get("/<module_id>")
def get_module(module_id):
    return json_response(ModuleService(store()).get(module_id).to_dict())


@module_bp.post("")
def create_module():
    module = ModuleService(store()).create(json_body())
    return success_response("Module created successfully", 201, id=module.module_id, module_id=module.module_id)


@module_bp.put("/reorder")
def reorder_modules():
    updated = ModuleService(store()).reorder(json_body().get("modules"))
    return success_response("Modules reordered successfully", updated=updated)


@module_bp.put("/<module_id>")
def update_module(module_id):
    ModuleService(store()).update(module_id, json_body())
    return success_response("Module updated successfully")


@module_bp.delete("/<module_id>")
def delete_module(module_id):
    ModuleService(store()).delete(module_id)
    return success_response("Module deactivated successfully")

# controllers/version_controller.py
from flask import Blueprint, request

from controllers.common import dump, json_body, render_biz_error, store
from services.version_service import VersionService
from utils.exceptions import BizError
from utils.response import json_response, success_response

version_bp = Blueprint("versions", __name__, url_prefix="/api/versions")


@version_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@version_bp.get("")
def list_versions():
    """GET /api/versions?status=&is_current=  按版本号倒序"""
    versions = VersionService(store()).list(
        status=request.args.get("status"),
        is_current=request.args.get("is_current"),
    )
    return json_response(dump(versions))


@version_bp.get("/current")
def current_version():
    return json_response(VersionService(store()).get_current().to_dict())


@version_bp.get("/<version_id>")
def get_version(version_id):
    return json_response(VersionService(store()).get(version_id).to_dict())


@version_bp.get("/<version_id>/statistics")
def version_statistics(version_id):
    return json_response(VersionService(store()).statistics(version_id))


@version_bp.post("")
def create_version():
    version = VersionService(store()).create(json_body())
    return success_response("Version created successfully", 201, id=version.version_id, version_id=version.version_id)


@version_bp.put("/<version_id>")
def update_version(version_id):
    VersionService(store()).update(version_id, json_body())
    return success_response("Version updated successfully")


@version_bp.put("/<version_id>/set-current")
def set_current_version(version_id):
    VersionService(store()).set_current(version_id)
    return success_response("Current version updated successfully")


@version_bp.delete("/<version_id>")
def delete_version(version_id):
    message = VersionService(store()).delete(version_id)
    return success_response(message)

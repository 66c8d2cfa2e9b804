# controllers/user_controller.py
from flask import Blueprint, request

from controllers.common import dump, json_body, render_biz_error, store
from services.user_service import UserService
from utils.exceptions import BizError
from utils.response import json_response, success_response

user_bp = Blueprint("users", __name__, url_prefix="/api/users")


@user_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@user_bp.get("")
def list_users():
    """
    GET /api/users
    可选过滤：role、is_active；按创建时间倒序，不返回密码哈希
    """
    users = UserService(store()).list(role=request.args.get("role"), is_active=request.args.get("is_active"))
    return json_response(dump(users))


@user_bp.get("/<user_id>")
def get_user(user_id):
    return json_response(UserService(store()).get(user_id).to_dict())


@user_bp.post("")
def create_user():
    user = UserService(store()).create(json_body())
    return success_response("User created successfully", 201, id=user.user_id)


@user_bp.put("/<user_id>")
def update_user(user_id):
    UserService(store()).update(user_id, json_body())
    return success_response("User updated successfully")


@user_bp.put("/<user_id>/password")
def change_password(user_id):
    data = json_body()
    UserService(store()).change_password(user_id, data.get("oldPassword"), data.get("newPassword"))
    return success_response("Password updated successfully")


@user_bp.delete("/<user_id>")
def delete_user(user_id):
    """停用而非物理删除；最后一个管理员不可停用。"""
    UserService(store()).deactivate(user_id)
    return success_response("User deactivated successfully")

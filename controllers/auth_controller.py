# controllers/auth_controller.py
from flask import Blueprint

from controllers.common import json_body, render_biz_error, store
from services.user_service import UserService
from utils.exceptions import BizError
from utils.response import json_response, success_response

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


def _public_user(user):
    return {"id": user.user_id, "email": user.email, "name": user.name, "role": user.role}


@auth_bp.post("/login")
def login():
    data = json_body()
    user = UserService(store()).authenticate(data.get("email"), data.get("password"))
    return json_response({"success": True, "user": _public_user(user)})


@auth_bp.post("/register")
def register():
    user = UserService(store()).register(json_body())
    return json_response({"success": True, "user": _public_user(user)}, 201)


@auth_bp.post("/logout")
def logout():
    # 无服务端会话，客户端自行丢弃凭据
    return success_response("Logged out successfully")

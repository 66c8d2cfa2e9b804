# controllers/common.py
"""蓝图共用的小工具：请求体解析、实体序列化、BizError 渲染。"""
from flask import request

from extensions.store import get_store
from utils.exceptions import BizError
from utils.response import error_response


def store():
    return get_store()


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def dump(rows):
    return [row.to_dict() for row in rows]


def render_biz_error(e: BizError):
    return error_response(e.message, e.code, e.data)

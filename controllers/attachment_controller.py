# -*- coding: utf-8 -*-
"""上传文件访问接口."""

from __future__ import annotations

import os

from flask import Blueprint, abort, send_file

from controllers.common import store
from services.attachment_service import safe_join

attachment_bp = Blueprint("uploads", __name__, url_prefix="/uploads")


@attachment_bp.get("/<path:file_path>")
def serve_upload(file_path: str):
    """根据相对路径返回上传目录中的文件."""

    upload_dir = store().upload_dir
    if not upload_dir:
        abort(404)

    # 防止路径穿越访问其他目录
    target_path = safe_join(upload_dir, file_path)
    if target_path is None or not os.path.isfile(target_path):
        abort(404)

    return send_file(target_path, conditional=True)

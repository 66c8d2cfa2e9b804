from flask import jsonify


def json_response(data=None, code=200):
    """直接序列化资源（对象 / 数组），不做外层包装。"""
    resp = jsonify(data)
    resp.status_code = code
    return resp


def success_response(message="success", code=200, **extra):
    payload = {"success": True, "message": message}
    payload.update(extra)
    resp = jsonify(payload)
    resp.status_code = code
    return resp


def error_response(message, code=400, data=None):
    payload = {"error": message}
    if isinstance(data, dict):
        payload.update({k: v for k, v in data.items() if k != "error"})
    resp = jsonify(payload)
    resp.status_code = code
    return resp

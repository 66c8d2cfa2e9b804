# utils/exceptions.py
from typing import Any, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    data: Optional[Any]  # 附加数据，例如缺失字段列表

    def __init__(self, message: str = "Request failed", code: int = 400, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(description=message)


def missing_fields_error(fields) -> BizError:
    """创建接口必填字段缺失时的统一错误，逐个列出字段名。"""
    names = list(fields)
    return BizError(f"Missing required fields: {', '.join(names)}", 400, data={"fields": names})

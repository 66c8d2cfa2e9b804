import re

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

_TRUE_STRINGS = ("1", "true", "t", "yes", "y", "on")
_FALSE_STRINGS = ("0", "false", "f", "no", "n", "off", "")


def validate_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email))


def normalize_email(email):
    if email is None:
        return None
    return str(email).strip().lower()


def coerce_bool(value) -> bool:
    """
    把请求里各种"布尔风格"的值统一成 bool：
      True/False、0/1、"true"/"false"、"yes"/"no" ...
    无法识别的非空字符串按真值处理。
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    low = str(value).strip().lower()
    if low in _TRUE_STRINGS:
        return True
    if low in _FALSE_STRINGS:
        return False
    return True


def parse_optional_bool(raw):
    """查询参数解析：未传 / 无法识别返回 None。"""
    if raw is None:
        return None
    low = str(raw).strip().lower()
    if low in _TRUE_STRINGS:
        return True
    if low in _FALSE_STRINGS and low != "":
        return False
    return None


def missing_required(data: dict, *names: str) -> list[str]:
    """返回 data 中缺失或为空白的字段名。"""
    missing = []
    for name in names:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing

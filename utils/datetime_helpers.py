# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律按 UTC 存储（无时区信息），
接口层统一输出 ISO 8601 字符串。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """当前 UTC 时间（naive，便于直接写入 DateTime 列）。"""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat()


def parse_iso(value) -> Optional[datetime]:
    """解析 ISO 字符串；空值返回 ``None``，格式非法抛 ``ValueError``。

    带时区的输入会先换算到 UTC 再去掉时区信息。
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

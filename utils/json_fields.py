# -*- coding: utf-8 -*-
"""
json_fields.py
--------------------------------------------------------------------
JSON 字段编解码：tags / steps / linked_tests 等"弹性"列以 JSON 文本存储。

decode 永不抛异常：
- 空值 / "null" / "undefined" -> 返回 fallback
- 合法 JSON -> 返回解析结果（数组列会保证返回数组）
- 非法 JSON 且 fallback 为数组 -> 历史数据兼容：
    按逗号或换行拆分为去空白后的非空项；没有分隔符则整体包成单元素数组
- 其它情况 -> fallback
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_EMPTY_MARKERS = ("", "null", "undefined")
_LEGACY_SPLIT_RE = re.compile(r"[,\n]")


def _fresh(fallback: Any) -> Any:
    # 避免调用方共享同一个可变默认值
    if isinstance(fallback, list):
        return list(fallback)
    if isinstance(fallback, dict):
        return dict(fallback)
    return fallback


def decode(raw: Any, fallback: Any = None) -> Any:
    if raw is None:
        return _fresh(fallback)
    if not isinstance(raw, (str, bytes)):
        # 已经是结构化数据（例如 SQLite JSON 列或测试中直接赋值）
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if raw.strip() in _EMPTY_MARKERS:
        return _fresh(fallback)

    try:
        parsed = json.loads(raw)
    except ValueError:
        return _recover(raw, fallback)

    if parsed is None:
        return _fresh(fallback)
    if isinstance(fallback, list) and not isinstance(parsed, list):
        return [parsed]
    if isinstance(fallback, dict) and not isinstance(parsed, dict):
        return _fresh(fallback)
    return parsed


def _recover(raw: str, fallback: Any) -> Any:
    if not isinstance(fallback, list):
        logger.warning("Undecodable JSON field, using fallback: %r", raw[:100])
        return _fresh(fallback)
    if "," in raw or "\n" in raw:
        items = [part.strip() for part in _LEGACY_SPLIT_RE.split(raw)]
        items = [item for item in items if item]
        logger.debug("Recovered legacy delimited value as list: %s", items)
        return items
    return [raw]


def encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def is_valid_json(raw: Any) -> bool:
    """字符串是否为合法 JSON（None / 非字符串视为合法）。"""
    if raw is None or not isinstance(raw, str):
        return True
    try:
        json.loads(raw)
    except ValueError:
        return False
    return True

# -*- coding: utf-8 -*-
"""
update_builder.py
--------------------------------------------------------------------
部分更新（PUT）统一入口，按实体字段表驱动：

    builder = UpdateBuilder(BUG)
    assignments = builder.build(payload)          # [(field, value), ..., ("updated_at", now)]
    changes = builder.diff(bug, assignments)      # 真正变化的字段 -> History
    builder.apply(bug, assignments)

规则：
- 不在字段表里 / 不可变 / 主键 / created_at 的字段静默丢弃
- JSON 字段先 encode（None 保持 None）
- 布尔字段统一 coerce_bool
- DATETIME 字段接受 ISO 字符串，格式错误报 400
- 过滤后为空 -> BizError("No fields to update")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Tuple

from constants.field_descriptors import EntityDescriptor, FieldKind
from utils import json_fields
from utils.datetime_helpers import parse_iso, utc_now
from utils.exceptions import BizError
from utils.validators import coerce_bool

UPDATED_AT = "updated_at"

Assignment = Tuple[str, Any]


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: Optional[str]
    new_value: Optional[str]


class UpdateBuilder:
    def __init__(self, descriptor: EntityDescriptor, touch_field: Optional[str] = UPDATED_AT):
        self.descriptor = descriptor
        self.touch_field = touch_field

    def build(self, payload: Mapping[str, Any]) -> List[Assignment]:
        assignments: List[Assignment] = []
        for name, value in (payload or {}).items():
            if not self.descriptor.is_mutable(name):
                continue
            spec = self.descriptor.spec_for(name)
            assignments.append((name, self._bind(name, spec.kind, value)))

        if not assignments:
            raise BizError("No fields to update", 400)

        if self.touch_field:
            assignments.append((self.touch_field, utc_now()))
        return assignments

    def initial_values(self, payload: Mapping[str, Any]) -> dict:
        """
        创建时的列值：字段表里出现的字段都可写（包括不可变字段）。
        未提供的 JSON 字段写入空容器，保证读出总是数组 / 对象。
        """
        payload = payload or {}
        values = {}
        for name, spec in self.descriptor.fields.items():
            if name in self.descriptor.RESERVED:
                continue
            if name in payload and payload[name] is not None:
                values[name] = self._bind(name, spec.kind, payload[name])
            elif spec.kind is FieldKind.JSON:
                values[name] = json_fields.encode(spec.fallback())
        return values

    @staticmethod
    def _bind(name: str, kind: FieldKind, value: Any) -> Any:
        if kind is FieldKind.JSON:
            return None if value is None else json_fields.encode(value)
        if kind is FieldKind.BOOLEAN:
            return coerce_bool(value)
        if kind is FieldKind.DATETIME:
            try:
                return parse_iso(value)
            except (TypeError, ValueError):
                raise BizError(f"{name} must be an ISO 8601 datetime", 400)
        return value

    def diff(self, row, assignments: List[Assignment]) -> List[FieldChange]:
        """按序列化后的字符串比较新旧值；未变化的字段不产生记录。"""
        changes: List[FieldChange] = []
        for name, new in assignments:
            if name == self.touch_field:
                continue
            spec = self.descriptor.spec_for(name)
            old = getattr(row, name, None)
            if spec is not None and spec.kind is FieldKind.JSON:
                old_text = None if old is None else json_fields.encode(json_fields.decode(old, spec.fallback()))
                new_text = new
            else:
                old_text = canonical_text(old)
                new_text = canonical_text(new)
            if old_text != new_text:
                changes.append(FieldChange(name, old_text, new_text))
        return changes

    @staticmethod
    def apply(row, assignments: List[Assignment]) -> int:
        for name, value in assignments:
            setattr(row, name, value)
        return 1


def canonical_text(value: Any) -> Optional[str]:
    """History 里的值统一存字符串；bool 存 true/false，3.0 与 3 视为相同。"""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, dict)):
        return json_fields.encode(value)
    return str(value)

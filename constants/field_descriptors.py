# -*- coding: utf-8 -*-
"""
field_descriptors.py
--------------------------------------------------------------------
每个实体一张静态字段表：字段名 -> FieldSpec(kind, mutable, default)。

- kind=JSON     : 以 JSON 文本落库，读出时解码；default 为解码失败 / 空值时的兜底容器
- kind=BOOLEAN  : 写入前统一转成 bool
- kind=DATETIME : 接受 ISO 字符串，写入前解析成 datetime
- mutable=False : 仅创建时写入，部分更新（PUT）时静默丢弃

未出现在表里的字段（自增 id、业务主键、created_at / updated_at）一律不允许外部更新。
UpdateBuilder 与模型的 to_dict 都只读这张表，不再在各个接口里硬编码字段名。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional


class FieldKind(Enum):
    PLAIN = "plain"
    JSON = "json"
    BOOLEAN = "boolean"
    DATETIME = "datetime"


@dataclass(frozen=True)
class FieldSpec:
    kind: FieldKind = FieldKind.PLAIN
    mutable: bool = True
    default: Optional[Callable[[], Any]] = None

    def fallback(self) -> Any:
        return self.default() if self.default is not None else None


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    id_field: str
    fields: Mapping[str, FieldSpec] = field(default_factory=dict)

    # 所有实体都不允许外部改写的列
    RESERVED = ("id", "created_at", "updated_at")

    def spec_for(self, name: str) -> Optional[FieldSpec]:
        return self.fields.get(name)

    def is_mutable(self, name: str) -> bool:
        if name == self.id_field or name in self.RESERVED:
            return False
        spec = self.fields.get(name)
        return spec is not None and spec.mutable

    def names_of(self, kind: FieldKind) -> list[str]:
        return [name for name, spec in self.fields.items() if spec.kind is kind]

    @property
    def json_fields(self) -> list[str]:
        return self.names_of(FieldKind.JSON)

    @property
    def boolean_fields(self) -> list[str]:
        return self.names_of(FieldKind.BOOLEAN)


# ---- 简写 ----
def _plain(mutable: bool = True) -> FieldSpec:
    return FieldSpec(FieldKind.PLAIN, mutable)


def _json_list(mutable: bool = True) -> FieldSpec:
    return FieldSpec(FieldKind.JSON, mutable, list)


def _json_object(mutable: bool = True) -> FieldSpec:
    return FieldSpec(FieldKind.JSON, mutable, dict)


def _flag(mutable: bool = True) -> FieldSpec:
    return FieldSpec(FieldKind.BOOLEAN, mutable)


def _timestamp(mutable: bool = True) -> FieldSpec:
    return FieldSpec(FieldKind.DATETIME, mutable)


def _person(prefix: str, mutable: bool = True) -> Dict[str, FieldSpec]:
    """人员三元组：<prefix>_id / <prefix>_name / <prefix>_email"""
    return {f"{prefix}_{part}": _plain(mutable) for part in ("id", "name", "email")}


USER = EntityDescriptor(
    name="user",
    id_field="user_id",
    fields={
        "email": _plain(),
        "name": _plain(),
        "role": _plain(),
        "is_active": _flag(),
        # 密码只能经 /password 或服务层哈希后写入
        "password_hash": _plain(mutable=False),
        "created_by": _plain(mutable=False),
        "last_login": _timestamp(mutable=False),
    },
)

MODULE = EntityDescriptor(
    name="module",
    id_field="module_id",
    fields={
        "name": _plain(),
        "description": _plain(),
        "icon": _plain(),
        "display_order": _plain(),
        "status": _plain(),
        "created_by": _plain(mutable=False),
    },
)

VERSION = EntityDescriptor(
    name="version",
    id_field="version_id",
    fields={
        "version_number": _plain(),
        "version_name": _plain(),
        "description": _plain(),
        "release_date": _plain(),
        "status": _plain(),
        "is_current": _flag(),
        "features": _json_list(),
        "bug_fixes": _json_list(),
        "known_issues": _json_list(),
        "created_by": _plain(mutable=False),
    },
)

FEATURE = EntityDescriptor(
    name="feature",
    id_field="feature_id",
    fields={
        "title": _plain(),
        "description": _plain(),
        "business_value": _plain(),
        "user_story": _plain(),
        "acceptance_criteria": _json_list(),
        "priority": _plain(),
        "feature_type": _plain(),
        "category": _plain(),
        "complexity": _plain(),
        "status": _plain(),
        "module_id": _plain(),
        "target_version": _plain(),
        "linked_tests": _json_list(),
        "related_features": _json_list(),
        "dependencies": _json_list(),
        "blocks": _json_list(),
        **_person("creator", mutable=False),
        **_person("owner"),
        **_person("developer"),
        **_person("tester"),
        "estimated_hours": _plain(),
        "actual_hours": _plain(),
        "progress_percentage": _plain(),
        "technical_notes": _plain(),
        "api_endpoints": _json_list(),
        "database_changes": _plain(),
        "dependencies_external": _plain(),
        "api_changes": _flag(),
        "breaking_changes": _flag(),
        # 计划日期（YYYY-MM-DD 字符串）
        "start_date": _plain(),
        "end_date": _plain(),
        "development_start_date": _plain(),
        "development_end_date": _plain(),
        "testing_start_date": _plain(),
        "testing_end_date": _plain(),
        "started_at": _timestamp(),
        "completed_at": _timestamp(),
        "released_at": _timestamp(),
        "attachments": _json_list(),
        "tags": _json_list(),
        "is_deleted": _flag(),
    },
)

BUG = EntityDescriptor(
    name="bug",
    id_field="bug_id",
    fields={
        "title": _plain(),
        "description": _plain(),
        "steps_to_reproduce": _json_list(),
        "expected_result": _plain(),
        "actual_result": _plain(),
        "priority": _plain(),
        "severity": _plain(),
        "category": _plain(),
        "type": _plain(),
        "status": _plain(),
        "resolution": _plain(),
        "linked_tests": _json_list(),
        "related_bugs": _json_list(),
        "parent_bug_id": _plain(),
        "module_id": _plain(),
        "session_id": _plain(),
        **_person("reporter"),
        **_person("assignee"),
        **_person("verifier"),
        "environment": _json_object(),
        "found_in_version": _plain(),
        "fixed_in_version": _plain(),
        "target_release": _plain(),
        "resolved_at": _timestamp(),
        "verified_at": _timestamp(),
        "attachments": _json_list(),
        "tags": _json_list(),
        "is_deleted": _flag(),
    },
)

TEST_CASE = EntityDescriptor(
    name="test",
    id_field="test_id",
    fields={
        "title": _plain(),
        "description": _plain(),
        "module": _plain(),
        "category": _plain(),
        "priority": _plain(),
        "steps": _json_list(),
        "expected_result": _plain(),
        "prerequisites": _json_list(),
        "test_data": _json_object(),
        "tags": _json_list(),
        "is_active": _flag(),
        "created_by": _plain(mutable=False),
    },
)

SESSION = EntityDescriptor(
    name="session",
    id_field="session_id",
    fields={
        "version_id": _plain(),
        "tester_id": _plain(mutable=False),
        "tester_name": _plain(),
        "tester_email": _plain(),
        "environment": _plain(),
        "browser": _plain(),
        "status": _plain(),
        "overall_status": _plain(),
        "overall_notes": _plain(),
        "is_active": _flag(),
        "started_at": _timestamp(mutable=False),
        "completed_at": _timestamp(),
    },
)

RESULT = EntityDescriptor(
    name="result",
    id_field="result_id",
    fields={
        "session_id": _plain(mutable=False),
        "test_id": _plain(),
        "test_case_id": _plain(),
        "module_name": _plain(),
        "test_case_title": _plain(),
        "test_name": _plain(),
        "status": _plain(),
        "priority": _plain(),
        "category": _plain(),
        "passed": _flag(),
        "bugs_found": _plain(),
        "notes": _plain(),
        "error_message": _plain(),
        "screenshots": _json_list(),
        "tested_by": _plain(),
        "tested_at": _timestamp(mutable=False),
    },
)

FEEDBACK = EntityDescriptor(
    name="feedback",
    id_field="feedback_id",
    fields={
        "session_id": _plain(mutable=False),
        "module_name": _plain(),
        "feedback_type": _plain(),
        "severity": _plain(),
        "title": _plain(),
        "description": _plain(),
        "steps_to_reproduce": _plain(),
        "expected_behavior": _plain(),
        "actual_behavior": _plain(),
        "screenshots": _json_list(),
        "created_by": _plain(mutable=False),
    },
)

COMMENT = EntityDescriptor(
    name="comment",
    id_field="comment_id",
    fields={
        "is_internal": _flag(),
    },
)

ATTACHMENT = EntityDescriptor(name="attachment", id_field="attachment_id")

HISTORY = EntityDescriptor(name="history", id_field="history_id")

DEPENDENCY = EntityDescriptor(
    name="dependency",
    id_field="dependency_id",
    fields={
        "is_critical": _flag(),
    },
)

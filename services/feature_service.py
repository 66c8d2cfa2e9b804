# -*- coding: utf-8 -*-
"""
feature_service.py
--------------------------------------------------------------------
功能规划（upcoming features）：
- 必填：title / module_id / target_version / creator_name
- 部分更新逐字段写 History；状态流转不限制
- 删除 = is_deleted + Cancelled
- 关联 / 解除关联测试用例、依赖边、评论、附件、统计
"""

from __future__ import annotations

import logging
from typing import List, Mapping

from constants.bug import Priority
from constants.feature import (
    DEFAULT_DEPENDENCY_TYPE, FeatureStatus, validate_feature_fields,
)
from constants.field_descriptors import FEATURE
from models.dependency import FeatureDependency
from models.feature import Feature
from models.test_case import TestCase
from repositories.feature_repository import FeatureRepository
from repositories.test_case_repository import TestCaseRepository
from services.attachment_service import AttachmentService
from services.base import StoreService
from services.comment_service import CommentService
from services.history_service import Actor, HistoryAction, HistoryRecorder
from services.statistics_service import EntityStatistics
from services.update_builder import UpdateBuilder
from utils import json_fields
from utils.datetime_helpers import utc_now
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_id
from utils.validators import coerce_bool, missing_required

logger = logging.getLogger(__name__)

ENTITY = "feature"
REQUIRED_FIELDS = ("title", "module_id", "target_version", "creator_name")
UNKNOWN_ACTOR = "Unknown"


def _validate_payload(data: Mapping):
    validate_feature_fields(
        priority=data.get("priority"),
        status=data.get("status"),
        feature_type=data.get("feature_type"),
        complexity=data.get("complexity"),
        progress_percentage=data.get("progress_percentage"),
    )


def _actor(data: Mapping) -> Actor:
    return Actor.from_payload(data, "changed_by", default_name=UNKNOWN_ACTOR)


class FeatureService(StoreService):
    def __init__(self, store):
        super().__init__(store)
        self.repo = FeatureRepository(store)
        self.tests = TestCaseRepository(store)
        self.builder = UpdateBuilder(FEATURE)
        self.history = HistoryRecorder(store, ENTITY)
        self.comments = CommentService(store, ENTITY, required=("comment_text", "author_name"))
        self.attachments = AttachmentService(store, ENTITY)

    # ---------- 查询 ----------
    def list(self, args: Mapping) -> List[Feature]:
        return self.repo.list(args)

    def get(self, feature_id: str) -> Feature:
        feature = self.repo.get(feature_id)
        if not feature:
            raise BizError("Feature not found", 404)
        return feature

    def list_by_version(self, version_id: str) -> List[Feature]:
        return self.repo.list_by_version(version_id)

    def list_by_module(self, module_id: str) -> List[Feature]:
        return self.repo.list_by_module(module_id)

    def list_by_test(self, test_id: str) -> List[Feature]:
        return self.repo.list_linking_test(test_id)

    def linked_tests(self, feature_id: str) -> List[TestCase]:
        feature = self.get(feature_id)
        return self.tests.list_active_by_ids(json_fields.decode(feature.linked_tests, []))

    # ---------- 创建 ----------
    def create(self, data: dict) -> Feature:
        missing = missing_required(data, *REQUIRED_FIELDS)
        if missing:
            raise missing_fields_error(missing)
        _validate_payload(data)

        values = self.builder.initial_values(data)
        values.pop("is_deleted", None)
        if values.get("progress_percentage") is not None:
            values["progress_percentage"] = int(values["progress_percentage"])
        feature = Feature(feature_id=generate_id("FEAT"), **values)
        self.repo.add(feature)
        self._commit()
        logger.info("Feature created: %s (%s)", feature.feature_id, feature.target_version)

        self.history.record(
            feature.feature_id, HistoryAction.CREATED,
            actor=Actor(data.get("creator_id"), data.get("creator_name")),
        )
        return feature

    # ---------- 更新 ----------
    def update(self, feature_id: str, data: dict):
        feature = self.get(feature_id)
        payload = dict(data or {})
        actor = Actor(payload.pop("changed_by_id", None), payload.pop("changed_by_name", None) or UNKNOWN_ACTOR)
        _validate_payload(payload)
        if payload.get("progress_percentage") is not None:
            payload["progress_percentage"] = int(payload["progress_percentage"])

        assignments = self.builder.build(payload)
        changes = self.builder.diff(feature, assignments)
        self.builder.apply(feature, assignments)
        self._commit()

        self.history.record_changes(feature_id, changes, actor)
        return feature, changes

    def change_status(self, feature_id: str, data: dict) -> Feature:
        status = (data or {}).get("status")
        if not status:
            raise BizError("Status is required", 400)
        validate_feature_fields(status=status)

        feature = self.get(feature_id)
        previous = feature.status
        now = utc_now()
        feature.status = status
        feature.updated_at = now
        self._commit()
        logger.info("Feature %s status %s -> %s", feature_id, previous, status)

        self.history.record(feature_id, HistoryAction.STATUS_CHANGED, "status", previous, status, _actor(data))
        return feature

    def delete(self, feature_id: str, data: dict = None) -> Feature:
        feature = self.get(feature_id)
        feature.soft_delete()
        feature.status = FeatureStatus.CANCELLED.value
        feature.updated_at = utc_now()
        self._commit()
        logger.info("Feature cancelled: %s", feature_id)

        self.history.record(feature_id, HistoryAction.DELETED, "is_deleted", "false", "true", _actor(data))
        return feature

    # ---------- 关联用例 ----------
    def link_test(self, feature_id: str, data: dict) -> bool:
        """返回 False 表示已经关联过（不报错、不写历史）。"""
        test_id = (data or {}).get("test_id")
        if not test_id:
            raise BizError("test_id is required", 400)
        feature = self.get(feature_id)
        linked = json_fields.decode(feature.linked_tests, [])
        if test_id in linked:
            return False
        linked.append(test_id)
        feature.linked_tests = json_fields.encode(linked)
        feature.updated_at = utc_now()
        self._commit()

        self.history.record(feature_id, HistoryAction.TEST_LINKED, "linked_tests", None, test_id, _actor(data))
        return True

    def unlink_test(self, feature_id: str, test_id: str, data: dict = None) -> Feature:
        feature = self.get(feature_id)
        linked = [tid for tid in json_fields.decode(feature.linked_tests, []) if tid != test_id]
        feature.linked_tests = json_fields.encode(linked)
        feature.updated_at = utc_now()
        self._commit()

        self.history.record(feature_id, HistoryAction.TEST_UNLINKED, "linked_tests", test_id, None, _actor(data))
        return feature

    # ---------- 依赖 ----------
    def list_dependencies(self, feature_id: str) -> List[FeatureDependency]:
        self.get(feature_id)
        return self.repo.list_dependencies(feature_id)

    def add_dependency(self, feature_id: str, data: dict) -> FeatureDependency:
        depends_on = (data or {}).get("depends_on_feature_id")
        if not depends_on:
            raise BizError("depends_on_feature_id is required", 400)
        if depends_on == feature_id:
            raise BizError("A feature cannot depend on itself", 400)
        self.get(feature_id)
        if not self.repo.exists(depends_on):
            raise BizError("Dependency target feature not found", 404)

        dependency = FeatureDependency(
            feature_id=feature_id,
            depends_on_feature_id=depends_on,
            dependency_type=data.get("dependency_type") or DEFAULT_DEPENDENCY_TYPE,
            is_critical=coerce_bool(data.get("is_critical")),
            notes=data.get("notes"),
        )
        self.repo.add_dependency(dependency)
        self._commit()
        logger.info("Feature %s now depends on %s", feature_id, depends_on)
        return dependency

    def remove_dependency(self, feature_id: str, dependency_id) -> None:
        try:
            dependency_id = int(dependency_id)
        except (TypeError, ValueError):
            raise BizError("Dependency not found", 404)
        dependency = self.repo.get_dependency(feature_id, dependency_id)
        if not dependency:
            raise BizError("Dependency not found", 404)
        self.repo.delete(dependency)
        self._commit()

    # ---------- 评论 / 历史 ----------
    def add_comment(self, feature_id: str, data: dict):
        self.get(feature_id)
        return self.comments.add(feature_id, data)

    def list_comments(self, feature_id: str):
        self.get(feature_id)
        return self.comments.list(feature_id)

    def list_history(self, feature_id: str) -> List[dict]:
        self.get(feature_id)
        return self.history.list(feature_id)

    # ---------- 附件 ----------
    def list_attachments(self, feature_id: str):
        self.get(feature_id)
        return self.attachments.list(feature_id)

    def upload_attachments(self, feature_id: str, files, form: Mapping):
        feature = self.get(feature_id)
        actor = Actor.from_payload(form, "uploaded_by")
        rows = self.attachments.save(feature_id, files, actor)
        ids = json_fields.decode(feature.attachments, [])
        ids.extend(row.attachment_id for row in rows)
        feature.attachments = json_fields.encode(ids)
        feature.updated_at = utc_now()
        self.attachments.commit_or_cleanup(rows)

        self.history.record(
            feature_id, HistoryAction.ATTACHMENT_ADDED, "attachments", None,
            f"{len(rows)} file(s) uploaded", actor,
        )
        return rows

    def delete_attachment(self, feature_id: str, attachment_id: str, data: Mapping = None):
        feature = self.get(feature_id)
        row = self.attachments.get(feature_id, attachment_id)
        original_name = row.original_name
        ids = [i for i in json_fields.decode(feature.attachments, []) if i != attachment_id]
        feature.attachments = json_fields.encode(ids)
        feature.updated_at = utc_now()
        self.attachments.remove(row)
        self._commit()

        self.history.record(
            feature_id, HistoryAction.ATTACHMENT_DELETED, "attachments", original_name, None,
            Actor.from_payload(data, "deleted_by"),
        )

    # ---------- 统计 ----------
    def stats(self, module_id=None, target_version=None) -> dict:
        buckets = EntityStatistics(self.store).buckets(
            Feature,
            {"status": FeatureStatus.values(), "priority": Priority.values()},
            include_deleted=False,
            module_id=module_id,
            target_version=target_version,
        )
        by_status, by_priority = buckets["status"], buckets["priority"]
        return {
            "total_features": buckets["total"],
            "planned": by_status.get(FeatureStatus.PLANNED.value, 0),
            "in_design": by_status.get(FeatureStatus.IN_DESIGN.value, 0),
            "in_development": by_status.get(FeatureStatus.IN_DEVELOPMENT.value, 0),
            "in_testing": by_status.get(FeatureStatus.IN_TESTING.value, 0),
            "completed": by_status.get(FeatureStatus.COMPLETED.value, 0),
            "p1_features": by_priority.get(Priority.P1.value, 0),
            "p2_features": by_priority.get(Priority.P2.value, 0),
            "p3_features": by_priority.get(Priority.P3.value, 0),
            "p4_features": by_priority.get(Priority.P4.value, 0),
            "by_status": by_status,
            "by_priority": by_priority,
        }

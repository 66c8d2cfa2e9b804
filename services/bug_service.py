# -*- coding: utf-8 -*-
"""
bug_service.py
--------------------------------------------------------------------
缺陷的业务逻辑：
- 创建 / 部分更新 / 状态流转 / 软删除，每一步都写 History
- 状态不做流转限制，只校验取值在枚举中；
  Fixed / Rejected 写 resolution + resolved_at，Verified 写 verified_at
- 关联用例、从缺陷生成回归用例、附件、评论
"""

from __future__ import annotations

import logging
from typing import List, Mapping

from constants.bug import (
    BugResolution, BugSeverity, BugStatus, Priority, RESOLVING_STATUSES, validate_bug_fields,
)
from constants.catalog import BUG_PRIORITY_TO_TEST_PRIORITY, TestPriority
from constants.field_descriptors import BUG
from models.bug import Bug
from models.test_case import TestCase
from repositories.bug_repository import BugRepository
from repositories.test_case_repository import TestCaseRepository
from services.attachment_service import AttachmentService
from services.base import StoreService
from services.comment_service import CommentService
from services.history_service import SYSTEM, Actor, HistoryAction, HistoryRecorder
from services.statistics_service import EntityStatistics
from services.update_builder import UpdateBuilder
from utils import json_fields
from utils.datetime_helpers import utc_now
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_id
from utils.validators import missing_required

logger = logging.getLogger(__name__)

ENTITY = "bug"


def workflow_side_effects(status: str, resolution=None, now=None) -> dict:
    """状态流转附带写入的字段：Fixed / Rejected -> resolution + resolved_at，Verified -> verified_at。"""
    now = now or utc_now()
    if status in RESOLVING_STATUSES:
        return {"resolution": resolution or RESOLVING_STATUSES[status], "resolved_at": now}
    if status == BugStatus.VERIFIED.value:
        return {"verified_at": now}
    return {}


def _validate_payload(data: Mapping):
    validate_bug_fields(
        priority=data.get("priority"),
        severity=data.get("severity"),
        bug_type=data.get("type"),
        status=data.get("status"),
        resolution=data.get("resolution"),
    )


class BugService(StoreService):
    def __init__(self, store):
        super().__init__(store)
        self.repo = BugRepository(store)
        self.tests = TestCaseRepository(store)
        self.builder = UpdateBuilder(BUG)
        self.history = HistoryRecorder(store, ENTITY)
        self.comments = CommentService(store, ENTITY)
        self.attachments = AttachmentService(store, ENTITY)

    # ---------- 查询 ----------
    def list(self, args: Mapping) -> List[Bug]:
        return self.repo.list(args)

    def get(self, bug_id: str) -> Bug:
        bug = self.repo.get(bug_id)
        if not bug:
            raise BizError("Bug not found", 404)
        return bug

    def list_by_test(self, test_id: str) -> List[Bug]:
        return self.repo.list_linking_test(test_id)

    def linked_tests(self, bug_id: str) -> List[TestCase]:
        bug = self.get(bug_id)
        return self.tests.list_active_by_ids(json_fields.decode(bug.linked_tests, []))

    # ---------- 创建 ----------
    def create(self, data: dict) -> Bug:
        missing = missing_required(data, "title")
        if missing:
            raise missing_fields_error(missing)
        _validate_payload(data)

        values = self.builder.initial_values(data)
        values.pop("is_deleted", None)
        bug = Bug(bug_id=generate_id("BUG"), **values)
        self.repo.add(bug)
        self._commit()
        logger.info("Bug created: %s", bug.bug_id)

        self.history.record(
            bug.bug_id, HistoryAction.CREATED,
            actor=Actor(data.get("reporter_id"), data.get("reporter_name")),
        )
        return bug

    # ---------- 更新 ----------
    def update(self, bug_id: str, data: dict):
        bug = self.get(bug_id)
        payload = dict(data or {})
        actor = Actor(payload.pop("changed_by_id", None), payload.pop("changed_by_name", None))
        _validate_payload(payload)

        assignments = self.builder.build(payload)
        assigned = dict(assignments)
        if "status" in assigned:
            # 调用方显式给出的 resolution / 时间戳优先
            effects = workflow_side_effects(assigned["status"], assigned.get("resolution"))
            assignments.extend((name, value) for name, value in effects.items() if name not in assigned)
        changes = self.builder.diff(bug, assignments)
        self.builder.apply(bug, assignments)
        self._commit()

        self.history.record_changes(bug_id, changes, actor)
        return bug, changes

    def change_status(self, bug_id: str, data: dict) -> Bug:
        status = (data or {}).get("status")
        if not status:
            raise BizError("Status is required", 400)
        resolution = data.get("resolution")
        validate_bug_fields(status=status, resolution=resolution)

        bug = self.get(bug_id)
        previous = bug.status
        now = utc_now()
        bug.status = status
        for name, value in workflow_side_effects(status, resolution, now).items():
            setattr(bug, name, value)
        bug.updated_at = now
        self._commit()
        logger.info("Bug %s status %s -> %s", bug_id, previous, status)

        self.history.record(
            bug_id, HistoryAction.STATUS_CHANGED, "status", previous, status,
            Actor.from_payload(data),
        )
        return bug

    def delete(self, bug_id: str, data: dict = None) -> Bug:
        """软删除：is_deleted + Rejected + Won't Fix，行保留。"""
        bug = self.get(bug_id)
        bug.soft_delete()
        bug.status = BugStatus.REJECTED.value
        bug.resolution = BugResolution.WONT_FIX.value
        bug.updated_at = utc_now()
        self._commit()
        logger.info("Bug soft-deleted: %s", bug_id)

        self.history.record(
            bug_id, HistoryAction.DELETED, "is_deleted", "false", "true",
            Actor.from_payload(data, "deleted_by", default_name=SYSTEM.name),
        )
        return bug

    # ---------- 关联用例 ----------
    def link_test(self, bug_id: str, data: dict) -> Bug:
        test_id = (data or {}).get("test_id")
        if not test_id:
            raise BizError("test_id is required", 400)
        bug = self.get(bug_id)
        linked = json_fields.decode(bug.linked_tests, [])
        if test_id in linked:
            raise BizError("Test already linked to this bug", 400)
        linked.append(test_id)
        bug.linked_tests = json_fields.encode(linked)
        bug.updated_at = utc_now()
        self._commit()

        self.history.record(
            bug_id, HistoryAction.TEST_LINKED, "linked_tests", None, test_id,
            Actor.from_payload(data, "linked_by"),
        )
        return bug

    def create_regression_test(self, bug_id: str, data: dict) -> TestCase:
        """从缺陷生成一条回归用例并反向关联到缺陷。"""
        bug = self.get(bug_id)
        created_by = (data or {}).get("created_by") or bug.reporter_name or SYSTEM.name
        steps = json_fields.decode(bug.steps_to_reproduce, [])
        tags = ["regression", f"bug-{bug.bug_id}"]
        if bug.type:
            tags.append(bug.type.lower())

        test = TestCase(
            test_id=generate_id("TEST"),
            title=f"Verify fix for: {bug.title}",
            description=(
                f"Regression test to verify that bug {bug.bug_id} has been fixed.\n\n"
                f"Original issue: {bug.description or ''}"
            ),
            module=bug.category or "General",
            category="Regression",
            priority=BUG_PRIORITY_TO_TEST_PRIORITY.get(bug.priority, TestPriority.LOW.value),
            steps=json_fields.encode(
                ["Prerequisites: Ensure the bug fix has been deployed", *steps, "Verify the issue no longer occurs"]
            ),
            expected_result=bug.expected_result or "System should work as expected without the reported issue",
            prerequisites=json_fields.encode([f"Bug {bug.bug_id} should be in Fixed or Verified status"]),
            test_data=json_fields.encode({
                "bug_id": bug.bug_id,
                "environment": json_fields.decode(bug.environment, {}),
                "found_in_version": bug.found_in_version,
            }),
            created_by=created_by,
            tags=json_fields.encode(tags),
            is_active=True,
        )
        self.tests.add(test)
        linked = json_fields.decode(bug.linked_tests, [])
        linked.append(test.test_id)
        bug.linked_tests = json_fields.encode(linked)
        bug.updated_at = utc_now()
        self._commit()
        logger.info("Regression test %s created from bug %s", test.test_id, bug_id)

        self.history.record(
            bug_id, HistoryAction.TEST_CREATED, "linked_tests", None, test.test_id,
            Actor(created_by, created_by),
        )
        return test

    # ---------- 评论 ----------
    def add_comment(self, bug_id: str, data: dict):
        self.get(bug_id)
        return self.comments.add(bug_id, data)

    def list_comments(self, bug_id: str):
        self.get(bug_id)
        return self.comments.list(bug_id)

    def list_history(self, bug_id: str) -> List[dict]:
        self.get(bug_id)
        return self.history.list(bug_id)

    # ---------- 附件 ----------
    def list_attachments(self, bug_id: str):
        self.get(bug_id)
        return self.attachments.list(bug_id)

    def upload_attachments(self, bug_id: str, files, form: Mapping):
        bug = self.get(bug_id)
        actor = Actor.from_payload(form, "uploaded_by")
        rows = self.attachments.save(bug_id, files, actor)
        ids = json_fields.decode(bug.attachments, [])
        ids.extend(row.attachment_id for row in rows)
        bug.attachments = json_fields.encode(ids)
        bug.updated_at = utc_now()
        self.attachments.commit_or_cleanup(rows)
        logger.info("%d attachment(s) uploaded to bug %s", len(rows), bug_id)

        self.history.record(
            bug_id, HistoryAction.ATTACHMENT_ADDED, "attachments", None,
            f"{len(rows)} file(s) uploaded", actor,
        )
        return rows

    def delete_attachment(self, bug_id: str, attachment_id: str, data: Mapping = None):
        bug = self.get(bug_id)
        row = self.attachments.get(bug_id, attachment_id)
        original_name = row.original_name
        ids = [i for i in json_fields.decode(bug.attachments, []) if i != attachment_id]
        bug.attachments = json_fields.encode(ids)
        bug.updated_at = utc_now()
        self.attachments.remove(row)
        self._commit()

        self.history.record(
            bug_id, HistoryAction.ATTACHMENT_DELETED, "attachments", original_name, None,
            Actor.from_payload(data, "deleted_by"),
        )

    # ---------- 统计 ----------
    def stats(self, module_id=None, assignee_id=None) -> dict:
        buckets = EntityStatistics(self.store).buckets(
            Bug,
            {"status": BugStatus.values(), "priority": Priority.values(), "severity": BugSeverity.values()},
            module_id=module_id,
            assignee_id=assignee_id,
        )
        by_status, by_priority, by_severity = buckets["status"], buckets["priority"], buckets["severity"]
        return {
            "total_bugs": buckets["total"],
            "new_bugs": by_status.get(BugStatus.NEW.value, 0),
            "in_progress": by_status.get(BugStatus.ASSIGNED.value, 0) + by_status.get(BugStatus.IN_PROGRESS.value, 0),
            "fixed": by_status.get(BugStatus.FIXED.value, 0),
            "verified": by_status.get(BugStatus.VERIFIED.value, 0),
            "closed": by_status.get(BugStatus.CLOSED.value, 0),
            "p1_bugs": by_priority.get(Priority.P1.value, 0),
            "p2_bugs": by_priority.get(Priority.P2.value, 0),
            "critical_bugs": by_severity.get(BugSeverity.CRITICAL.value, 0),
            "major_bugs": by_severity.get(BugSeverity.MAJOR.value, 0),
            "by_status": by_status,
            "by_priority": by_priority,
            "by_severity": by_severity,
        }

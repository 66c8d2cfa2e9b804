# services/test_case_service.py
from __future__ import annotations

import logging
from typing import List, Mapping

from sqlalchemy.exc import SQLAlchemyError

from constants.catalog import DEFAULT_TEST_CATEGORY, DEFAULT_TEST_PRIORITY, validate_test_priority
from constants.field_descriptors import TEST_CASE
from models.test_case import TestCase
from repositories.test_case_repository import TestCaseRepository
from services.base import StoreService
from services.update_builder import UpdateBuilder
from utils import json_fields
from utils.datetime_helpers import utc_now
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_id
from utils.validators import missing_required

logger = logging.getLogger(__name__)

SYNC_DEFAULT_CATEGORY = "General"
SYNC_DEFAULT_AUTHOR = "System"


class TestCaseService(StoreService):
    """
    自定义测试用例：
    - 软删除 = is_active=False，列表只返回启用中的
    - sync 按 test_id 批量 upsert，单条失败不影响其它条目
    """

    __test__ = False

    def __init__(self, store):
        super().__init__(store)
        self.repo = TestCaseRepository(store)
        self.builder = UpdateBuilder(TEST_CASE)

    def list(self, args: Mapping) -> List[TestCase]:
        return self.repo.list_active(args)

    def get(self, test_id: str) -> TestCase:
        test = self.repo.get(test_id)
        if not test:
            raise BizError("Test not found", 404)
        return test

    def create(self, data: dict) -> TestCase:
        missing = missing_required(data, "title", "module")
        if missing:
            raise missing_fields_error(missing)
        if data.get("priority"):
            validate_test_priority(data["priority"])

        values = self.builder.initial_values(data)
        values.setdefault("category", DEFAULT_TEST_CATEGORY)
        values.setdefault("priority", DEFAULT_TEST_PRIORITY)
        values.setdefault("is_active", True)
        test = TestCase(test_id=data.get("test_id") or generate_id("TEST"), **values)
        if self.repo.exists(test.test_id):
            raise BizError("Test ID already exists", 409)
        self.repo.add(test)
        self._commit("Test ID already exists")
        logger.info("Custom test created: %s", test.test_id)
        return test

    def update(self, test_id: str, data: dict) -> TestCase:
        test = self.get(test_id)
        if data.get("priority"):
            validate_test_priority(data["priority"])
        assignments = self.builder.build(data)
        self.builder.apply(test, assignments)
        self._commit()
        return test

    def deactivate(self, test_id: str) -> TestCase:
        test = self.get(test_id)
        test.is_active = False
        test.updated_at = utc_now()
        self._commit()
        logger.info("Custom test deactivated: %s", test_id)
        return test

    def sync(self, tests) -> dict:
        if not isinstance(tests, list):
            raise BizError("Tests must be an array", 400)

        processed = 0
        errors = []
        for item in tests:
            item = item if isinstance(item, dict) else {}
            test_id = item.get("test_id")
            missing = missing_required(item, "test_id", "title", "module")
            if missing:
                errors.append({"test_id": test_id, "error": f"Missing required fields: {', '.join(missing)}"})
                continue
            try:
                with self.store.session.begin_nested():
                    self._upsert(item)
                processed += 1
            except SQLAlchemyError as exc:
                logger.warning("Sync failed for test %s: %s", test_id, exc)
                errors.append({"test_id": test_id, "error": str(getattr(exc, "orig", None) or exc)})

        self._commit()
        logger.info("Synced %d custom test(s), %d error(s)", processed, len(errors))
        result = {"success": True, "processed": processed}
        if errors:
            result["errors"] = errors
        return result

    def _upsert(self, item: dict):
        values = {
            "title": item["title"],
            "description": item.get("description") or "",
            "module": item["module"],
            "category": item.get("category") or SYNC_DEFAULT_CATEGORY,
            "priority": item.get("priority") or DEFAULT_TEST_PRIORITY,
            "steps": json_fields.encode(item.get("steps") or []),
            "expected_result": item.get("expected_result"),
            "prerequisites": json_fields.encode(item.get("prerequisites") or []),
            "test_data": json_fields.encode(item.get("test_data") or {}),
            "tags": json_fields.encode(item.get("tags") or []),
        }
        existing = self.repo.get(item["test_id"])
        if existing:
            for name, value in values.items():
                setattr(existing, name, value)
            existing.updated_at = utc_now()
        else:
            self.repo.add(TestCase(
                test_id=item["test_id"],
                created_by=item.get("created_by") or SYNC_DEFAULT_AUTHOR,
                is_active=True,
                **values,
            ))
        self.store.session.flush()

# services/admin_service.py
from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from constants.field_descriptors import TEST_CASE
from models.session import TestFeedback, TestResult, TestSession
from models.test_case import TestCase
from repositories.test_case_repository import TestCaseRepository
from services.base import StoreService
from utils import json_fields
from utils.exceptions import BizError

logger = logging.getLogger(__name__)

# 清理顺序：先子表再父表
CLEARED_TABLES = (TestResult, TestFeedback, TestSession, TestCase)
PRESERVED_TABLES = ("users", "modules")


class AdminService(StoreService):
    """维护操作：清空测试数据、修复历史遗留的 JSON 列。"""

    def __init__(self, store):
        super().__init__(store)
        self.tests = TestCaseRepository(store)

    def reset_testing_data(self) -> dict:
        """全部清空或全部不变。"""
        counts = {}
        try:
            with self.store.transaction() as session:
                for model in CLEARED_TABLES:
                    result = session.execute(delete(model))
                    counts[model.__tablename__] = result.rowcount or 0
        except SQLAlchemyError as exc:
            logger.exception("Reset of testing data failed, rolled back")
            raise BizError(f"Failed to reset testing data: {getattr(exc, 'orig', None) or exc}", 500)

        logger.warning("Testing data cleared: %s", counts)
        return {
            "clearedTables": [model.__tablename__ for model in (TestSession, TestResult, TestFeedback, TestCase)],
            "preservedTables": list(PRESERVED_TABLES),
            "clearedRows": counts,
        }

    def fix_prerequisites(self) -> int:
        """纯文本 prerequisites -> 单元素 JSON 数组。"""
        fixed = 0
        for test in self.tests.list_all():
            raw = test.prerequisites
            if isinstance(raw, str) and raw and not json_fields.is_valid_json(raw):
                test.prerequisites = json_fields.encode([raw])
                fixed += 1
        self._commit()
        logger.info("Fixed prerequisites on %d test(s)", fixed)
        return fixed

    def clean_corrupted_data(self) -> int:
        """无法解析的 JSON 列替换为空容器（数组列 [] / 对象列 {}）。"""
        cleaned = 0
        columns = [(name, TEST_CASE.spec_for(name).fallback()) for name in TEST_CASE.json_fields]
        for test in self.tests.list_all():
            dirty = False
            for name, empty in columns:
                raw = getattr(test, name)
                if not json_fields.is_valid_json(raw):
                    setattr(test, name, json_fields.encode(empty))
                    dirty = True
            if dirty:
                cleaned += 1
        self._commit()
        logger.info("Cleaned corrupted JSON on %d test(s)", cleaned)
        return cleaned

# repositories/statistics_repository.py
"""
只读聚合查询。

所有"按状态分组"的统计都先 lower(trim(col)) 再 GROUP BY，
返回 (归一化键, 数量) 元组，由服务层映射回标准标签。
不把整表读进内存。
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, case, func, literal, select
from sqlalchemy.orm import aliased

from extensions.store import EntityStore
from models.bug import Bug
from models.feature import Feature
from models.module import Module
from models.session import TestFeedback, TestResult, TestSession
from models.test_case import TestCase
from models.user import User
from models.version import Version

PASS_KEYS = ("pass", "passed")
FAIL_KEYS = ("fail", "failed")


def normalized(column):
    return func.lower(func.trim(column))


def _flag_sum(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class StatisticsRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    @property
    def session(self):
        return self.store.session

    # ---------- 通用 ----------
    def count(self, model, *conditions) -> int:
        stmt = select(func.count()).select_from(model)
        if conditions:
            stmt = stmt.where(*conditions)
        return self.session.execute(stmt).scalar() or 0

    def grouped_counts(self, model, column, *conditions) -> List[Tuple[Optional[str], int]]:
        key = normalized(column).label("key")
        stmt = select(key, func.count().label("count")).select_from(model)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.group_by(key)
        return [(row.key, row.count) for row in self.session.execute(stmt)]

    def count_sessions_for(self, version_id: str) -> int:
        return self.count(TestSession, TestSession.version_id == version_id)

    # ---------- 测试结果 ----------
    def result_status_counts(self, version_id: Optional[str] = None):
        stmt = select(normalized(TestResult.status).label("key"), func.count().label("count"))
        stmt = self._scope_results(stmt, version_id)
        stmt = stmt.group_by(normalized(TestResult.status))
        return [(row.key, row.count) for row in self.session.execute(stmt)]

    def count_results(self, version_id: Optional[str] = None) -> int:
        stmt = self._scope_results(select(func.count(TestResult.id)), version_id)
        return self.session.execute(stmt).scalar() or 0

    def module_result_stats(self, version_id: Optional[str] = None):
        status = normalized(TestResult.status)
        stmt = select(
            TestResult.module_name,
            func.count(TestResult.id).label("total_tests"),
            func.count(func.distinct(TestResult.test_case_id)).label("distinct_tests"),
            _flag_sum(status.in_(PASS_KEYS)).label("passed"),
            _flag_sum(status.in_(FAIL_KEYS)).label("failed"),
            _flag_sum(status == "blocked").label("blocked"),
            _flag_sum(status.in_(("not started", "notstarted"))).label("not_started"),
            func.max(TestResult.tested_at).label("last_tested"),
        )
        stmt = self._scope_results(stmt, version_id)
        stmt = stmt.group_by(TestResult.module_name).order_by(TestResult.module_name.asc())
        return list(self.session.execute(stmt).mappings())

    def failing_results(self, version_id: str):
        stmt = select(
            TestResult.test_case_id,
            TestResult.test_case_title,
            TestResult.module_name,
            TestResult.notes,
            TestResult.error_message,
            TestResult.tested_at,
        )
        stmt = self._scope_results(stmt, version_id)
        stmt = stmt.where(normalized(TestResult.status).in_(FAIL_KEYS)).order_by(TestResult.tested_at.desc())
        return list(self.session.execute(stmt).mappings())

    def fixed_since_other_versions(self, version_id: str):
        """本版本通过、其它版本失败过的用例。"""
        prev = aliased(TestResult)
        prev_session = aliased(TestSession)
        stmt = (
            select(
                TestResult.test_case_id,
                TestResult.test_case_title,
                TestResult.module_name,
                prev.status.label("prev_status"),
                TestResult.status.label("curr_status"),
            )
            .distinct()
            .join(TestSession, TestResult.session_id == TestSession.session_id)
            .join(prev, prev.test_case_id == TestResult.test_case_id)
            .join(prev_session, and_(
                prev.session_id == prev_session.session_id,
                prev_session.version_id != TestSession.version_id,
            ))
            .where(
                TestSession.version_id == version_id,
                normalized(TestResult.status).in_(PASS_KEYS),
                normalized(prev.status).in_(FAIL_KEYS),
            )
        )
        return list(self.session.execute(stmt).mappings())

    def first_seen_in_version(self, version_id: str):
        """本版本第一次执行到的用例（此前没有其它版本的记录）。"""
        prev = aliased(TestResult)
        prev_session = aliased(TestSession)
        earlier = (
            select(literal(1))
            .select_from(prev)
            .join(prev_session, prev.session_id == prev_session.session_id)
            .where(
                prev.test_case_id == TestResult.test_case_id,
                prev_session.version_id != TestSession.version_id,
                prev.tested_at < TestResult.tested_at,
            )
            .exists()
        )
        stmt = (
            select(
                TestResult.test_case_id,
                TestResult.test_case_title,
                TestResult.module_name,
                TestResult.category,
            )
            .distinct()
            .join(TestSession, TestResult.session_id == TestSession.session_id)
            .where(TestSession.version_id == version_id, ~earlier)
        )
        return list(self.session.execute(stmt).mappings())

    def recent_results(self, limit: int = 10, inner: bool = False):
        """最近的执行结果，附带测试人员姓名。"""
        stmt = select(TestResult, TestSession.tester_name)
        if inner:
            stmt = stmt.join(TestSession, TestResult.session_id == TestSession.session_id)
        else:
            stmt = stmt.outerjoin(TestSession, TestResult.session_id == TestSession.session_id)
        stmt = stmt.order_by(TestResult.tested_at.desc(), TestResult.id.desc()).limit(limit)
        return list(self.session.execute(stmt).all())

    def recent_feedback(self, limit: int = 10):
        stmt = (
            select(TestFeedback, TestSession.tester_name)
            .join(TestSession, TestFeedback.session_id == TestSession.session_id)
            .order_by(TestFeedback.created_at.desc(), TestFeedback.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).all())

    def recent_sessions(self, limit: int = 5) -> List[TestSession]:
        stmt = select(TestSession).order_by(TestSession.started_at.desc(), TestSession.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def module_coverage(self):
        status = normalized(TestResult.status)
        stmt = (
            select(
                TestResult.module_name,
                func.count(func.distinct(TestResult.test_case_id)).label("tests_run"),
                (_flag_sum(status.in_(PASS_KEYS)) * 100.0 / func.count(TestResult.id)).label("pass_rate"),
            )
            .group_by(TestResult.module_name)
            .order_by(TestResult.module_name.asc())
        )
        return list(self.session.execute(stmt).mappings())

    # ---------- 按维度汇总 ----------
    def per_module_counts(self):
        feature_count = (
            select(func.count(Feature.id))
            .where(Feature.module_id == Module.module_id, Feature.is_deleted.is_(False))
            .scalar_subquery()
        )
        bug_count = (
            select(func.count(Bug.id))
            .where(Bug.module_id == Module.module_id, Bug.is_deleted.is_(False))
            .scalar_subquery()
        )
        test_count = (
            select(func.count(TestCase.id))
            .where(TestCase.module == Module.name, TestCase.is_active.is_(True))
            .scalar_subquery()
        )
        stmt = (
            select(
                Module.module_id,
                Module.name,
                feature_count.label("feature_count"),
                bug_count.label("bug_count"),
                test_count.label("test_count"),
            )
            .where(Module.status == "active")
            .order_by(Module.display_order.asc(), Module.name.asc())
        )
        return list(self.session.execute(stmt).mappings())

    def per_version_counts(self):
        feature_count = (
            select(func.count(Feature.id))
            .where(Feature.target_version == Version.version_id, Feature.is_deleted.is_(False))
            .scalar_subquery()
        )
        bug_count = (
            select(func.count(Bug.id))
            .where(Bug.found_in_version == Version.version_id, Bug.is_deleted.is_(False))
            .scalar_subquery()
        )
        session_count = (
            select(func.count(TestSession.id))
            .where(TestSession.version_id == Version.version_id)
            .scalar_subquery()
        )
        stmt = (
            select(
                Version.version_id,
                Version.version_name,
                Version.status,
                feature_count.label("feature_count"),
                bug_count.label("bug_count"),
                session_count.label("session_count"),
            )
            .order_by(Version.version_number.desc())
        )
        return list(self.session.execute(stmt).mappings())

    def per_user_counts(self):
        """会话 / 结果 / 缺陷均按邮箱关联用户（历史数据没有 user_id）。"""
        email = func.lower(User.email)
        session_count = (
            select(func.count(TestSession.id))
            .where(func.lower(TestSession.tester_email) == email)
            .scalar_subquery()
        )
        test_count = (
            select(func.count(TestResult.id))
            .where(func.lower(TestResult.tested_by) == email)
            .scalar_subquery()
        )
        bugs_reported = (
            select(func.count(Bug.id))
            .where(func.lower(Bug.reporter_email) == email)
            .scalar_subquery()
        )
        stmt = (
            select(
                User.user_id,
                User.name,
                User.email,
                session_count.label("session_count"),
                test_count.label("test_count"),
                bugs_reported.label("bugs_reported"),
            )
            .where(User.is_active.is_(True))
            .order_by(User.name.asc())
        )
        return list(self.session.execute(stmt).mappings())

    # ---------- 内部 ----------
    @staticmethod
    def _scope_results(stmt, version_id: Optional[str]):
        if version_id is None:
            return stmt.select_from(TestResult)
        return (
            stmt.select_from(TestResult)
            .join(TestSession, TestResult.session_id == TestSession.session_id)
            .where(TestSession.version_id == version_id)
        )


def bucket(rows: Iterable[Tuple[Optional[str], int]], label) -> dict:
    """(归一化键, 数量) -> {标准标签: 数量}，别名合并到同一标签。"""
    buckets: dict = {}
    for key, count in rows:
        name = label(key)
        buckets[name] = buckets.get(name, 0) + int(count or 0)
    return buckets

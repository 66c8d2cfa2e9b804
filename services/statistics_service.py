# -*- coding: utf-8 -*-
"""
statistics_service.py
--------------------------------------------------------------------
只读统计：
- EntityStatistics：缺陷 / 功能规划按状态、优先级、严重程度分桶
- StatisticsService：门户总览、按模块 / 版本 / 用户汇总、仪表盘
分组键在 SQL 中做 lower(trim())，这里只负责映射回标准标签并合并别名。
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from constants.catalog import canonical_label, canonical_result_status
from models.session import TestFeedback, TestResult, TestSession
from repositories.statistics_repository import StatisticsRepository, bucket
from utils.datetime_helpers import to_iso

SCOPE_COLUMNS = ("module_id", "assignee_id", "target_version", "owner_id")


class EntityStatistics:
    def __init__(self, store):
        self.repo = StatisticsRepository(store)

    def buckets(self, model, dimensions: Mapping[str, Iterable[str]], *, include_deleted: bool = True,
                **scope: Optional[str]) -> Dict[str, object]:
        """
        dimensions: {列名: 标准标签词表}
        scope: 可选的精确过滤（module_id / assignee_id ...），值为空时忽略
        """
        conditions = []
        for name, value in scope.items():
            if name in SCOPE_COLUMNS and value:
                conditions.append(getattr(model, name) == value)
        if not include_deleted and hasattr(model, "is_deleted"):
            conditions.append(model.is_deleted.is_(False))

        result: Dict[str, object] = {"total": self.repo.count(model, *conditions)}
        for column, vocabulary in dimensions.items():
            vocabulary = list(vocabulary)
            rows = self.repo.grouped_counts(model, getattr(model, column), *conditions)
            result[column] = bucket(rows, lambda key, v=vocabulary: canonical_label(key, v))
        return result


def _result_row(result: TestResult, tester_name: Optional[str]) -> dict:
    data = result.to_dict()
    data["tester_name"] = tester_name
    return data


class StatisticsService:
    def __init__(self, store):
        self.repo = StatisticsRepository(store)

    def overview(self) -> dict:
        repo = self.repo
        return {
            "totalSessions": repo.count(TestSession),
            "activeSessions": repo.count(TestSession, TestSession.is_active.is_(True)),
            "totalTests": repo.count(TestResult),
            "totalFeedback": repo.count(TestFeedback),
            "moduleStats": [self._module_row(row) for row in repo.module_result_stats()],
            "recentSessions": [s.to_dict() for s in repo.recent_sessions(5)],
            "criticalBugs": repo.count(TestFeedback, TestFeedback.severity == "Critical"),
            "testsByStatus": self.tests_by_status(),
            "recentTests": [
                {
                    "test_case_id": result.test_case_id,
                    "test_case_title": result.test_case_title,
                    "module_name": result.module_name,
                    "status": result.status,
                    "tested_at": to_iso(result.tested_at),
                    "tester_name": tester_name,
                }
                for result, tester_name in repo.recent_results(10)
            ],
        }

    def tests_by_status(self, version_id: Optional[str] = None) -> list:
        counts = bucket(self.repo.result_status_counts(version_id), canonical_result_status)
        return [{"status": status, "count": count} for status, count in counts.items()]

    @staticmethod
    def _module_row(row) -> dict:
        return {
            "module_name": row["module_name"],
            "total_tests": row["distinct_tests"],
            "passed": row["passed"],
            "failed": row["failed"],
            "blocked": row["blocked"],
            "not_started": row["not_started"],
            "last_tested": to_iso(row["last_tested"]),
        }

    def by_module(self) -> list:
        return [dict(row) for row in self.repo.per_module_counts()]

    def by_version(self) -> list:
        return [dict(row) for row in self.repo.per_version_counts()]

    def by_user(self) -> list:
        return [dict(row) for row in self.repo.per_user_counts()]

    def dashboard(self) -> dict:
        repo = self.repo
        feedback = []
        for item, tester_name in repo.recent_feedback(10):
            data = item.to_dict()
            data["tester_name"] = tester_name
            feedback.append(data)
        return {
            "recentTests": [_result_row(r, name) for r, name in repo.recent_results(10, inner=True)],
            "recentFeedback": feedback,
            "moduleCoverage": [
                {
                    "module_name": row["module_name"],
                    "tests_run": row["tests_run"],
                    "pass_rate": float(row["pass_rate"] or 0),
                }
                for row in repo.module_coverage()
            ],
        }

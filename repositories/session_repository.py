# repositories/session_repository.py
from __future__ import annotations

from typing import List, Mapping, Optional

from sqlalchemy import select

from models.session import TestSession, TestResult, TestFeedback
from repositories.base import EntityRepository


class SessionRepository(EntityRepository[TestSession]):
    """测试会话 + 其下的执行结果与反馈。"""

    model = TestSession
    key_column = "session_id"

    def list(self) -> List[TestSession]:
        stmt = select(TestSession).order_by(TestSession.started_at.desc(), TestSession.id.desc())
        return self.scalars(stmt)

    def results_of(self, session_id: str) -> List[TestResult]:
        stmt = (
            select(TestResult)
            .where(TestResult.session_id == session_id)
            .order_by(TestResult.tested_at.desc(), TestResult.id.desc())
        )
        return self.scalars(stmt)

    def feedback_of(self, session_id: str) -> List[TestFeedback]:
        stmt = (
            select(TestFeedback)
            .where(TestFeedback.session_id == session_id)
            .order_by(TestFeedback.created_at.desc(), TestFeedback.id.desc())
        )
        return self.scalars(stmt)


class ResultRepository(EntityRepository[TestResult]):
    model = TestResult
    key_column = "id"

    def list_by_module(self, module_name: str) -> List[TestResult]:
        stmt = (
            select(TestResult)
            .where(TestResult.module_name == module_name)
            .order_by(TestResult.tested_at.desc(), TestResult.id.desc())
        )
        return self.scalars(stmt)


class FeedbackRepository(EntityRepository[TestFeedback]):
    model = TestFeedback
    key_column = "id"

    FILTERS = ("severity", "module_name", "feedback_type")

    def list(self, args: Mapping, limit: Optional[int] = None) -> List[TestFeedback]:
        stmt = select(TestFeedback)
        for name in self.FILTERS:
            value = args.get(name)
            if value not in (None, "", "all"):
                stmt = stmt.where(getattr(TestFeedback, name) == value)
        stmt = stmt.order_by(TestFeedback.created_at.desc(), TestFeedback.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        return self.scalars(stmt)

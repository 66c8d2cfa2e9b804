# services/session_service.py
from __future__ import annotations

import logging
from typing import List, Mapping

from constants.catalog import SessionStatus, canonical_result_status
from constants.field_descriptors import FEEDBACK, RESULT, SESSION
from models.session import TestFeedback, TestResult, TestSession
from repositories.session_repository import FeedbackRepository, ResultRepository, SessionRepository
from repositories.version_repository import VersionRepository
from services.base import StoreService
from services.update_builder import UpdateBuilder
from utils.datetime_helpers import utc_now
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_id
from utils.validators import missing_required

logger = logging.getLogger(__name__)


class SessionService(StoreService):
    """测试会话、执行结果与反馈。"""

    def __init__(self, store):
        super().__init__(store)
        self.sessions = SessionRepository(store)
        self.results = ResultRepository(store)
        self.feedback = FeedbackRepository(store)
        self.versions = VersionRepository(store)

    # ---------- 会话 ----------
    def list(self) -> List[TestSession]:
        return self.sessions.list()

    def get(self, session_id: str) -> TestSession:
        session = self.sessions.get(session_id)
        if not session:
            raise BizError("Session not found", 404)
        return session

    def detail(self, session_id: str) -> dict:
        session = self.get(session_id)
        return {
            "session": session.to_dict(),
            "results": [r.to_dict() for r in self.sessions.results_of(session_id)],
            "feedback": [f.to_dict() for f in self.sessions.feedback_of(session_id)],
        }

    def create(self, data: dict) -> TestSession:
        missing = missing_required(data, "tester_name")
        if missing:
            raise missing_fields_error(missing)
        version_id = data.get("version_id") or None
        if version_id and not self.versions.exists(version_id):
            raise BizError("Version not found", 404)

        values = UpdateBuilder(SESSION).initial_values(data)
        values.update(version_id=version_id, status=SessionStatus.ACTIVE.value, is_active=True)
        values.pop("started_at", None)
        values.pop("completed_at", None)
        session = TestSession(session_id=generate_id("SESSION"), **values)
        self.sessions.add(session)
        self._commit()
        logger.info("Test session started: %s by %s", session.session_id, session.tester_name)
        return session

    def update(self, session_id: str, data: dict) -> TestSession:
        """记录总体结论；写 completed_at。"""
        session = self.get(session_id)
        session.overall_status = data.get("overall_status")
        session.overall_notes = data.get("overall_notes")
        session.completed_at = utc_now()
        self._commit()
        return session

    def end(self, session_id: str) -> TestSession:
        session = self.get(session_id)
        session.status = SessionStatus.COMPLETED.value
        session.is_active = False
        session.completed_at = utc_now()
        self._commit()
        logger.info("Test session ended: %s", session_id)
        return session

    # ---------- 结果 ----------
    def add_result(self, data: dict, session_id: str = None) -> TestResult:
        payload = dict(data or {})
        if session_id:
            payload["session_id"] = session_id
        missing = missing_required(payload, "session_id")
        if missing:
            raise missing_fields_error(missing)
        self.get(payload["session_id"])

        values = UpdateBuilder(RESULT).initial_values(payload)
        values.pop("tested_at", None)
        if "passed" not in payload and values.get("status"):
            values["passed"] = canonical_result_status(str(values["status"]).strip().lower()) == "Pass"
        result = TestResult(**values)
        self.results.add(result)
        self._commit()
        return result

    def results_for_module(self, module_name: str) -> List[TestResult]:
        return self.results.list_by_module(module_name)

    # ---------- 反馈 ----------
    def add_feedback(self, data: dict) -> TestFeedback:
        missing = missing_required(data, "session_id", "title")
        if missing:
            raise missing_fields_error(missing)
        self.get(data["session_id"])
        values = UpdateBuilder(FEEDBACK).initial_values(data)
        feedback = TestFeedback(**values)
        self.feedback.add(feedback)
        self._commit()
        return feedback

    def list_feedback(self, args: Mapping) -> List[TestFeedback]:
        return self.feedback.list(args)
